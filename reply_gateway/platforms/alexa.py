from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Literal, Mapping, Optional

from pydantic import Field

from reply_gateway.platforms.base import DeviceCapabilities, DirectiveEntry, Event, Intent, Reply
from reply_gateway.schemas.payload import PayloadModel

if TYPE_CHECKING:
    from reply_gateway.services.renderer import Renderer

ALEXA = "alexa"


class PlayBehavior(str, Enum):
    REPLACE_ALL = "REPLACE_ALL"
    ENQUEUE = "ENQUEUE"
    REPLACE_ENQUEUED = "REPLACE_ENQUEUED"

    @classmethod
    def _missing_(cls, value):
        # Older transitions spell the default "REPLACE".
        if value == "REPLACE":
            return cls.REPLACE_ALL
        return None


class PlainTextHint(PayloadModel):
    type: Literal["PlainText"] = "PlainText"
    text: str


class HintEntry(DirectiveEntry):
    type: Literal["Hint"] = "Hint"
    hint: PlainTextHint


class SlotUpdate(PayloadModel):
    name: str
    confirmation_status: str = "NONE"
    value: Optional[Any] = None


class UpdatedIntent(PayloadModel):
    name: str
    confirmation_status: str = "NONE"
    slots: Dict[str, SlotUpdate] = Field(default_factory=dict)


class DialogDelegateEntry(DirectiveEntry):
    type: Literal["Dialog.Delegate"] = "Dialog.Delegate"
    updated_intent: Optional[UpdatedIntent] = None


class RenderTemplateEntry(DirectiveEntry):
    type: Literal["Display.RenderTemplate"] = "Display.RenderTemplate"
    template: Dict[str, Any]


class AudioStream(PayloadModel):
    url: str
    token: str
    offset_in_milliseconds: int = 0


class AudioItem(PayloadModel):
    stream: AudioStream


class AudioPlayEntry(DirectiveEntry):
    type: Literal["AudioPlayer.Play"] = "AudioPlayer.Play"
    play_behavior: PlayBehavior = PlayBehavior.REPLACE_ALL
    audio_item: AudioItem


class AudioStopEntry(DirectiveEntry):
    type: Literal["AudioPlayer.Stop"] = "AudioPlayer.Stop"


class VideoMetadata(PayloadModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None


class VideoItem(PayloadModel):
    source: str
    metadata: Optional[VideoMetadata] = None


class VideoLaunchEntry(DirectiveEntry):
    type: Literal["VideoApp.Launch"] = "VideoApp.Launch"
    video_item: VideoItem


@dataclass(frozen=True)
class AlexaEvent(Event):
    platform = ALEXA

    user_id: Optional[str] = None
    supported_interfaces: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], renderer: "Renderer") -> "AlexaEvent":
        """Build an event from an Alexa skill request envelope."""
        request = raw.get("request") or {}
        session = raw.get("session") or {}
        context = raw.get("context")

        intent = None
        raw_intent = request.get("intent")
        if raw_intent and raw_intent.get("name"):
            slots = raw_intent.get("slots") or {}
            intent = Intent(
                name=raw_intent["name"],
                params={name: slot.get("value") for name, slot in slots.items()},
            )

        interfaces: Mapping[str, Any] = {}
        user_id = (session.get("user") or {}).get("userId")
        if context:
            system = context.get("System") or {}
            device = system.get("device") or {}
            interfaces = device.get("supportedInterfaces") or {}
            user_id = user_id or (system.get("user") or {}).get("userId")

        return cls(
            raw_event=raw,
            renderer=renderer,
            intent=intent,
            capabilities=DeviceCapabilities(
                display="Display" in interfaces,
                audio_player="AudioPlayer" in interfaces,
                video="VideoApp" in interfaces,
            ),
            locale=request.get("locale"),
            session_id=session.get("sessionId"),
            request_type=request.get("type"),
            user_id=user_id,
            supported_interfaces=interfaces,
        )


class AlexaReply(Reply):
    platform = ALEXA

    def __init__(self, session_attributes: Optional[Dict[str, Any]] = None) -> None:
        super().__init__()
        self.session_attributes: Dict[str, Any] = dict(session_attributes or {})

    @classmethod
    def for_event(cls, event: Event) -> "AlexaReply":
        # Carry session attributes over so the skill keeps its state.
        session = event.raw_event.get("session") or {}
        return cls(session_attributes=session.get("attributes"))

    def to_payload(self) -> Dict[str, Any]:
        response: Dict[str, Any] = {}
        if self.statements:
            response["outputSpeech"] = _ssml(self.statements)
        if self.reprompts:
            response["reprompt"] = {"outputSpeech": _ssml(self.reprompts)}
        if self.card is not None:
            response["card"] = self.card.dump()
        if self.directives:
            response["directives"] = [entry.dump() for entry in self.directives]
        response["shouldEndSession"] = self.terminated

        return {
            "version": "1.0",
            "sessionAttributes": self.session_attributes,
            "response": response,
        }


def _ssml(parts) -> Dict[str, str]:
    return {"type": "SSML", "ssml": "<speak>" + " ".join(parts) + "</speak>"}
