"""Tests for the view renderers."""
import json

import httpx
import pytest

from conftest import TEST_VIEWS, alexa_request
from reply_gateway.clients.template_service import TemplateServiceRenderer
from reply_gateway.core.config import settings
from reply_gateway.core.errors import ContentResolutionError
from reply_gateway.platforms import AlexaEvent
from reply_gateway.services.renderer import ViewsRenderer


def event_for(renderer, **kwargs):
    return AlexaEvent.from_raw(alexa_request(**kwargs), renderer)


@pytest.mark.asyncio
async def test_renders_string_with_variable(renderer):
    event = event_for(renderer)

    assert await renderer.render_path("Speech.Welcome", event) == "Welcome Ada!"


@pytest.mark.asyncio
async def test_prefers_event_locale(renderer):
    event = event_for(renderer, locale="de-DE")

    assert await renderer.render_path("Speech.Welcome", event) == "Willkommen Ada!"


@pytest.mark.asyncio
async def test_falls_back_to_default_locale(renderer):
    event = event_for(renderer, locale="de-DE")

    assert await renderer.render_path("Suggestions.Main", event) == ["Yes", "No"]


@pytest.mark.asyncio
async def test_renders_nested_objects_with_intent_slots(renderer):
    event = event_for(renderer, intent="BookTable", slots={"time": "19:30"})

    assert await renderer.render_path("Hint.Book", event) == "book a table for 19:30"


@pytest.mark.asyncio
async def test_params_take_precedence(renderer):
    event = event_for(renderer)

    content = await renderer.render_path("Display.Body", event, {"token": "abc"})

    assert content == {"type": "BodyTemplate1", "token": "abc", "title": "Booking"}


@pytest.mark.asyncio
async def test_whole_placeholder_keeps_value_type(renderer):
    event = event_for(renderer)

    content = await renderer.render_path("Display.Body", event, {"token": None})

    assert content["token"] is None


@pytest.mark.asyncio
async def test_async_variable_resolver():
    async def resolve_name(event):
        return event.session_id

    renderer = ViewsRenderer(TEST_VIEWS, variables={"name": resolve_name})
    event = event_for(renderer)

    assert await renderer.render_path("Speech.Welcome", event) == (
        "Welcome amzn1.echo-api.session.1!"
    )


@pytest.mark.asyncio
async def test_missing_view(renderer):
    with pytest.raises(ContentResolutionError, match="Card.Nope"):
        await renderer.render_path("Card.Nope", event_for(renderer))


@pytest.mark.asyncio
async def test_missing_variable(renderer):
    # LaunchRequest carries no slots, so {time} cannot be filled.
    with pytest.raises(ContentResolutionError, match="time"):
        await renderer.render_path("Hint.Book", event_for(renderer))


def test_from_file_missing_path_yields_empty_views(tmp_path):
    renderer = ViewsRenderer.from_file(tmp_path / "absent.json")

    assert isinstance(renderer, ViewsRenderer)


@pytest.mark.asyncio
async def test_from_file_loads_json(tmp_path):
    views_file = tmp_path / "views.json"
    views_file.write_text(json.dumps({"en-GB": {"Speech": {"Bye": "Cheerio"}}}))
    renderer = ViewsRenderer.from_file(views_file, default_locale="en-GB")

    assert await renderer.render_path("Speech.Bye", event_for(renderer)) == "Cheerio"


def _template_service(handler):
    return TemplateServiceRenderer(
        base_url="http://templates.test", timeout=2, transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
async def test_template_service_posts_turn_context(renderer):
    captured = {}

    def handler(request):
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"content": {"type": "Simple", "title": "Remote"}})

    service = _template_service(handler)
    event = event_for(renderer, intent="BookTable", slots={"time": "20:00"})
    try:
        content = await service.render_path("Card.Remote", event, {"token": "t"})
    finally:
        await service.close()

    assert content == {"type": "Simple", "title": "Remote"}
    assert captured["path"] == "/render"
    assert captured["body"] == {
        "view": "Card.Remote",
        "locale": "en-US",
        "platform": "alexa",
        "intent": {"name": "BookTable", "params": {"time": "20:00"}},
        "params": {"token": "t"},
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, body",
    [
        (500, {"json": {"error": "boom"}}),
        (200, {"json": {"unexpected": True}}),
        (200, {"text": "not json"}),
    ],
)
async def test_template_service_failures(renderer, status_code, body):
    service = _template_service(lambda request: httpx.Response(status_code, **body))
    try:
        with pytest.raises(ContentResolutionError):
            await service.render_path("Card.Remote", event_for(renderer))
    finally:
        await service.close()


def test_template_service_requires_url(monkeypatch):
    monkeypatch.setattr(settings, "template_service_url", "")

    with pytest.raises(ValueError):
        TemplateServiceRenderer()
