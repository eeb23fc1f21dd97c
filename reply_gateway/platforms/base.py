from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from reply_gateway.core.errors import ExclusivityError
from reply_gateway.schemas.cards import Card
from reply_gateway.schemas.directives import DirectiveDescriptor, TransitionPayload
from reply_gateway.schemas.payload import PayloadModel

if TYPE_CHECKING:
    from reply_gateway.directives.types import Directive
    from reply_gateway.services.renderer import Renderer


@dataclass(frozen=True)
class Intent:
    """Resolved intent for the turn: name plus slot values."""

    name: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeviceCapabilities:
    """What the requesting device can do."""

    display: bool = False
    audio_player: bool = False
    video: bool = False
    web_browser: bool = False


@dataclass(frozen=True)
class Event:
    """
    Read-only context for one turn.

    Platform subclasses build instances from the raw request with
    ``from_raw`` and may expose extra fields; directives of other platforms
    only rely on the attributes defined here.
    """

    platform: ClassVar[str] = ""

    raw_event: Mapping[str, Any]
    renderer: "Renderer"
    intent: Optional[Intent] = None
    capabilities: DeviceCapabilities = field(default_factory=DeviceCapabilities)
    locale: Optional[str] = None
    session_id: Optional[str] = None
    request_type: Optional[str] = None


class DirectiveEntry(PayloadModel):
    """One entry of a reply's directive list, tagged by ``type``."""

    type: str


class Reply(ABC):
    """
    Mutable accumulator of the outgoing response for one turn.

    Owns a single card slot and an append-only list of tagged directive
    entries. ``has_directive`` answers exclusivity questions against what has
    been accumulated so far.
    """

    platform: ClassVar[str] = ""

    def __init__(self) -> None:
        self.card: Optional[Card] = None
        self.directives: List[DirectiveEntry] = []
        self.statements: List[str] = []
        self.reprompts: List[str] = []
        self.terminated = False

    @classmethod
    def for_event(cls, event: Event) -> "Reply":
        """Create an empty reply for the given turn."""
        return cls()

    def has_directive(self, category: str) -> bool:
        """Return True if a card (category ``"card"``) or an entry of that type exists."""
        if category == "card":
            return self.card is not None
        return any(entry.type == category for entry in self.directives)

    def set_card(self, card: Card) -> None:
        if self.card is not None:
            raise ExclusivityError("At most one card can be specified in a response")
        self.card = card

    def add_directive(self, entry: DirectiveEntry) -> None:
        self.directives.append(entry)

    def add_statement(self, text: str) -> None:
        if text:
            self.statements.append(text)

    def add_reprompt(self, text: str) -> None:
        if text:
            self.reprompts.append(text)

    def terminate(self) -> None:
        self.terminated = True

    @abstractmethod
    def to_payload(self) -> Dict[str, Any]:
        """Serialize the reply into the platform's wire JSON."""


@dataclass(frozen=True)
class Transition:
    """The dialog engine's output for a turn, consumed once by the directive engine."""

    directives: Tuple[Union[DirectiveDescriptor, "Directive"], ...] = ()
    say: Tuple[str, ...] = ()
    reprompt: Tuple[str, ...] = ()
    to: Optional[str] = None
    flow: str = "continue"

    @classmethod
    def from_payload(cls, payload: TransitionPayload) -> "Transition":
        return cls(
            directives=tuple(payload.directives),
            say=tuple(payload.say),
            reprompt=tuple(payload.reprompt),
            to=payload.to,
            flow=payload.flow,
        )
