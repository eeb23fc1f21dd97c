import pytest

from reply_gateway.core.errors import ContentShapeError
from reply_gateway.schemas.cards import (
    AskForPermissionsConsentCard,
    LinkAccountCard,
    SimpleCard,
    StandardCard,
    is_card,
    parse_card,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ({"type": "Simple"}, True),
        ({"type": "Standard", "title": "x"}, True),
        ({"type": "LinkAccount"}, True),
        ({"type": "AskForPermissionsConsent"}, True),
        ({"type": "Fancy"}, False),
        ({"foo": 1}, False),
        ("Simple", False),
        (None, False),
        (SimpleCard(title="x"), True),
    ],
)
def test_is_card(value, expected):
    assert is_card(value) is expected


def test_parse_card_selects_model_by_type():
    assert isinstance(parse_card({"type": "Simple", "title": "T"}), SimpleCard)
    assert isinstance(parse_card({"type": "LinkAccount"}), LinkAccountCard)

    standard = parse_card(
        {
            "type": "Standard",
            "title": "T",
            "text": "body",
            "image": {"largeImageUrl": "https://example.com/l.png"},
        }
    )
    assert isinstance(standard, StandardCard)
    assert standard.image.large_image_url == "https://example.com/l.png"


def test_permissions_consent_card_keeps_permissions():
    card = parse_card(
        {"type": "AskForPermissionsConsent", "permissions": ["read::alexa:device:all:address"]}
    )

    assert isinstance(card, AskForPermissionsConsentCard)
    assert card.dump() == {
        "type": "AskForPermissionsConsent",
        "permissions": ["read::alexa:device:all:address"],
    }


def test_unknown_fields_are_preserved():
    card = parse_card({"type": "Simple", "title": "T", "content": "C", "extra": 1})

    assert card.dump() == {"type": "Simple", "title": "T", "content": "C", "extra": 1}


def test_parse_card_returns_models_unchanged():
    card = SimpleCard(title="T")

    assert parse_card(card) is card


@pytest.mark.parametrize(
    "value",
    [
        {"foo": 1},
        {"type": "Fancy"},
        {"type": "Simple", "title": {"nested": True}},
    ],
)
def test_parse_card_rejects_bad_shapes(value):
    with pytest.raises(ContentShapeError):
        parse_card(value)
