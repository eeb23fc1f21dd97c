from collections.abc import Mapping
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from reply_gateway.core.errors import ContentShapeError
from reply_gateway.schemas.payload import PayloadModel


class CardImage(PayloadModel):
    small_image_url: Optional[str] = None
    large_image_url: Optional[str] = None


class _CardModel(PayloadModel):
    # Platforms add card fields over time; keep unknown keys verbatim.
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )


class SimpleCard(_CardModel):
    type: Literal["Simple"] = "Simple"
    title: Optional[str] = None
    content: Optional[str] = None


class StandardCard(_CardModel):
    type: Literal["Standard"] = "Standard"
    title: Optional[str] = None
    text: Optional[str] = None
    image: Optional[CardImage] = None


class LinkAccountCard(_CardModel):
    type: Literal["LinkAccount"] = "LinkAccount"


class AskForPermissionsConsentCard(_CardModel):
    type: Literal["AskForPermissionsConsent"] = "AskForPermissionsConsent"
    permissions: Optional[List[str]] = None


Card = Annotated[
    Union[SimpleCard, StandardCard, LinkAccountCard, AskForPermissionsConsentCard],
    Field(discriminator="type"),
]

CARD_TYPES = frozenset(
    {"Simple", "Standard", "LinkAccount", "AskForPermissionsConsent"}
)

_card_adapter: TypeAdapter = TypeAdapter(Card)


def is_card(value: Any) -> bool:
    """Return True when value carries one of the recognized card type tags."""
    if isinstance(value, _CardModel):
        return True
    return isinstance(value, Mapping) and value.get("type") in CARD_TYPES


def parse_card(value: Any) -> Card:
    """
    Validate a card-shaped object and return its tagged model.

    Raises ContentShapeError when the value has no recognized ``type`` tag or
    its fields do not match the tagged shape.
    """
    if isinstance(value, _CardModel):
        return value
    if not is_card(value):
        raise ContentShapeError(
            "Expected a card object with 'type' in "
            f"{sorted(CARD_TYPES)}, got {value!r}"
        )
    try:
        return _card_adapter.validate_python(dict(value))
    except ValidationError as exc:
        raise ContentShapeError(f"Invalid {value.get('type')} card: {exc}") from exc
