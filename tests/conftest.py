"""Pytest configuration and fixtures."""
import os
from pathlib import Path

import pytest

# Set test environment before importing the app
os.environ["APP_ENV"] = "test"
os.environ["LOG_FILE_PATH"] = ""
os.environ["RENDERER_BACKEND"] = "views"
os.environ["VIEWS_PATH"] = str(Path(__file__).resolve().parents[1] / "views.json")

from reply_gateway.platforms import AlexaEvent, AlexaReply, DialogFlowEvent, DialogFlowReply
from reply_gateway.platforms.base import Transition
from reply_gateway.services.renderer import ViewsRenderer

TEST_VIEWS = {
    "en-US": {
        "Card": {
            "Simple": {"type": "Simple", "title": "T", "content": "C"},
            "Standard": {"type": "Standard", "title": "Hello", "text": "Hi {name}"},
            "Broken": {"foo": 1},
        },
        "Hint": {"Book": "book a table for {time}"},
        "Display": {
            "Body": {"type": "BodyTemplate1", "token": "{token}", "title": "Booking"},
        },
        "Speech": {"Welcome": "Welcome {name}!"},
        "List": {"Restaurants": {"title": "Pick one", "items": [{"title": "North"}]}},
        "Carousel": {"Restaurants": {"items": [{"title": "South"}]}},
        "Suggestions": {"Main": ["Yes", "No"], "Single": "Maybe"},
        "BasicCard": {"Info": {"title": "Opening hours", "formattedText": "9 to 5"}},
    },
    "de-DE": {
        "Speech": {"Welcome": "Willkommen {name}!"},
    },
}


def alexa_request(*, intent=None, slots=None, interfaces=None, locale="en-US", with_context=True):
    """Build a minimal Alexa skill request envelope."""
    request = {"type": "IntentRequest" if intent else "LaunchRequest", "locale": locale}
    if intent:
        request["intent"] = {
            "name": intent,
            "confirmationStatus": "NONE",
            "slots": {
                name: {"name": name, "value": value}
                for name, value in (slots or {}).items()
            },
        }
    raw = {
        "version": "1.0",
        "session": {
            "sessionId": "amzn1.echo-api.session.1",
            "attributes": {"state": "entry"},
            "user": {"userId": "amzn1.ask.account.1"},
        },
        "request": request,
    }
    if with_context:
        raw["context"] = {
            "System": {"device": {"supportedInterfaces": interfaces or {}}},
        }
    return raw


def dialogflow_request(*, intent="BookTable", parameters=None, capabilities=None):
    """Build a minimal Dialogflow v2 webhook request."""
    return {
        "session": "projects/demo/agent/sessions/abc",
        "queryResult": {
            "intent": {"displayName": intent},
            "parameters": parameters or {},
            "languageCode": "en-US",
        },
        "originalDetectIntentRequest": {
            "source": "google",
            "payload": {
                "surface": {
                    "capabilities": [{"name": name} for name in (capabilities or [])]
                }
            },
        },
    }


@pytest.fixture
def renderer():
    """In-memory renderer with test views and one computed variable."""
    return ViewsRenderer(TEST_VIEWS, variables={"name": lambda event: "Ada"})


@pytest.fixture
def alexa_event(renderer):
    return AlexaEvent.from_raw(
        alexa_request(intent="BookTable", slots={"time": "18:00"}), renderer
    )


@pytest.fixture
def display_event(renderer):
    return AlexaEvent.from_raw(
        alexa_request(
            intent="BookTable",
            interfaces={"Display": {}, "AudioPlayer": {}, "VideoApp": {}},
        ),
        renderer,
    )


@pytest.fixture
def alexa_reply():
    return AlexaReply()


@pytest.fixture
def dialogflow_event(renderer):
    return DialogFlowEvent.from_raw(
        dialogflow_request(capabilities=["actions.capability.SCREEN_OUTPUT"]), renderer
    )


@pytest.fixture
def dialogflow_reply():
    return DialogFlowReply()


@pytest.fixture
def transition():
    return Transition()
