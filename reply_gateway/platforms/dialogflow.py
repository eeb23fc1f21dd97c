from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Literal, Mapping, Optional

from reply_gateway.core.errors import DirectiveUsageError
from reply_gateway.platforms.base import DeviceCapabilities, DirectiveEntry, Event, Intent, Reply
from reply_gateway.schemas.payload import PayloadModel

if TYPE_CHECKING:
    from reply_gateway.services.renderer import Renderer

DIALOGFLOW = "dialogflow"

OPTION_INTENT = "actions.intent.OPTION"
OPTION_VALUE_SPEC_TYPE = "type.googleapis.com/google.actions.v2.OptionValueSpec"

SCREEN_OUTPUT = "actions.capability.SCREEN_OUTPUT"
AUDIO_OUTPUT = "actions.capability.AUDIO_OUTPUT"
MEDIA_RESPONSE_AUDIO = "actions.capability.MEDIA_RESPONSE_AUDIO"
WEB_BROWSER = "actions.capability.WEB_BROWSER"


class PossibleIntents(PayloadModel):
    intent: str = OPTION_INTENT
    input_value_data: Dict[str, Any]


class ListSelectEntry(DirectiveEntry):
    type: Literal["possibleIntents"] = "possibleIntents"
    possible_intents: PossibleIntents


class SystemIntent(PayloadModel):
    intent: str = OPTION_INTENT
    spec: Dict[str, Any]


class CarouselSelectEntry(DirectiveEntry):
    type: Literal["systemIntent"] = "systemIntent"
    system_intent: SystemIntent


class SuggestionsEntry(DirectiveEntry):
    type: Literal["suggestions"] = "suggestions"
    suggestions: List[str]


class BasicCardEntry(DirectiveEntry):
    type: Literal["basicCard"] = "basicCard"
    basic_card: Dict[str, Any]


@dataclass(frozen=True)
class DialogFlowEvent(Event):
    platform = DIALOGFLOW

    surface_capabilities: FrozenSet[str] = field(default_factory=frozenset)
    source: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], renderer: "Renderer") -> "DialogFlowEvent":
        """Build an event from a Dialogflow v2 webhook request."""
        query = raw.get("queryResult") or {}
        original = raw.get("originalDetectIntentRequest") or {}
        surface = (original.get("payload") or {}).get("surface") or {}
        capabilities = frozenset(
            item.get("name") for item in surface.get("capabilities") or [] if item.get("name")
        )

        intent = None
        display_name = (query.get("intent") or {}).get("displayName")
        if display_name:
            intent = Intent(name=display_name, params=dict(query.get("parameters") or {}))

        return cls(
            raw_event=raw,
            renderer=renderer,
            intent=intent,
            capabilities=DeviceCapabilities(
                display=SCREEN_OUTPUT in capabilities,
                audio_player=MEDIA_RESPONSE_AUDIO in capabilities,
                web_browser=WEB_BROWSER in capabilities,
            ),
            locale=query.get("languageCode"),
            session_id=raw.get("session"),
            request_type="IntentRequest" if intent else None,
            surface_capabilities=capabilities,
            source=original.get("source"),
        )


class DialogFlowReply(Reply):
    platform = DIALOGFLOW

    def to_payload(self) -> Dict[str, Any]:
        speech = " ".join(self.statements)
        items: List[Dict[str, Any]] = []
        if speech:
            items.append({"simpleResponse": {"textToSpeech": speech}})

        google: Dict[str, Any] = {
            "expectUserResponse": not self.terminated,
            "richResponse": {"items": items},
        }
        suggestions: List[Dict[str, str]] = []
        possible_intents: List[Dict[str, Any]] = []
        system_intents: List[Dict[str, Any]] = []
        for entry in self.directives:
            if isinstance(entry, BasicCardEntry):
                items.append({"basicCard": entry.basic_card})
            elif isinstance(entry, SuggestionsEntry):
                suggestions.extend({"title": title} for title in entry.suggestions)
            elif isinstance(entry, CarouselSelectEntry):
                system_intents.append(entry.system_intent.dump())
            elif isinstance(entry, ListSelectEntry):
                possible_intents.append(entry.possible_intents.dump())
            else:
                raise TypeError(f"Unsupported Dialogflow directive entry: {entry.type}")

        # The webhook format has room for exactly one systemIntent.
        if len(system_intents) > 1:
            raise DirectiveUsageError(
                f"A Dialogflow response carries one systemIntent, got {len(system_intents)} "
                "carousel selections"
            )
        if system_intents:
            google["systemIntent"] = system_intents[0]
        if possible_intents:
            google["possibleIntents"] = possible_intents
        if suggestions:
            google["richResponse"]["suggestions"] = suggestions
        if self.reprompts:
            google["noInputPrompts"] = [
                {"textToSpeech": text} for text in self.reprompts
            ]

        return {"fulfillmentText": speech, "payload": {"google": google}}
