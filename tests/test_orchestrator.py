import logging

import pytest

from conftest import alexa_request, dialogflow_request
from reply_gateway.core.errors import ContentResolutionError, UnknownPlatformError
from reply_gateway.core.logging import get_platform
from reply_gateway.platforms import Transition
from reply_gateway.schemas.inbound import TurnRequest
from reply_gateway.services.orchestrator import TurnOrchestrator


@pytest.fixture
def orchestrator(renderer):
    return TurnOrchestrator(renderer=renderer)


@pytest.mark.asyncio
async def test_build_reply_renders_speech_then_directives(orchestrator, alexa_reply, alexa_event):
    transition = Transition(
        say=("Speech.Welcome", "Hint.Book"),
        reprompt=("Speech.Welcome",),
        flow="terminate",
    )

    applied = await orchestrator.build_reply(alexa_reply, alexa_event, transition)

    assert applied == 0
    assert alexa_reply.statements == ["Welcome Ada!", "book a table for 18:00"]
    assert alexa_reply.reprompts == ["Welcome Ada!"]
    assert alexa_reply.terminated is True


@pytest.mark.asyncio
async def test_yield_keeps_session_open(orchestrator, alexa_reply, alexa_event):
    await orchestrator.build_reply(alexa_reply, alexa_event, Transition(flow="yield"))

    assert alexa_reply.terminated is False


@pytest.mark.asyncio
async def test_handle_turn(orchestrator, caplog):
    payload = TurnRequest.model_validate(
        {
            "event": dialogflow_request(capabilities=["actions.capability.SCREEN_OUTPUT"]),
            "transition": {
                "say": ["Speech.Welcome"],
                "directives": [{"BasicCard": "BasicCard.Info"}, {"key": "alexaStopAudio"}],
            },
        }
    )

    with caplog.at_level(logging.INFO, logger="reply_gateway.services.orchestrator"):
        response = await orchestrator.handle_turn("dialogflow", payload)

    assert response.platform == "dialogflow"
    assert response.directives_applied == 1
    assert response.payload["fulfillmentText"] == "Welcome Ada!"
    items = response.payload["payload"]["google"]["richResponse"]["items"]
    assert items[1] == {"basicCard": {"title": "Opening hours", "formattedText": "9 to 5"}}

    (record,) = [r for r in caplog.records if r.getMessage() == "turn completed"]
    assert record.intent == "BookTable"
    assert record.directives_applied == 1
    assert get_platform() == "-"


@pytest.mark.asyncio
async def test_handle_turn_propagates_directive_errors(orchestrator):
    payload = TurnRequest.model_validate(
        {"event": alexa_request(), "transition": {"say": ["Speech.Missing"]}}
    )

    with pytest.raises(ContentResolutionError):
        await orchestrator.handle_turn("alexa", payload)
    assert get_platform() == "-"


@pytest.mark.asyncio
async def test_handle_turn_unknown_platform(orchestrator):
    with pytest.raises(UnknownPlatformError):
        await orchestrator.handle_turn("cortana", TurnRequest(event={}))
