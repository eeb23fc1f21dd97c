from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional

from reply_gateway.core.errors import ContentResolutionError

if TYPE_CHECKING:
    from reply_gateway.platforms.base import Event, Reply, Transition

DirectiveHandler = Callable[["Reply", "Event", "Transition"], Awaitable[None]]


class Directive(ABC):
    """A platform-tagged unit of work that mutates a reply."""

    platform: str = ""
    key: str = ""

    @abstractmethod
    async def apply(self, reply: "Reply", event: "Event", transition: "Transition") -> None:
        """Write this directive's effect to the reply or raise a DirectiveError."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.platform}:{self.key}>"


class HandlerDirective(Directive):
    """Wraps the closure produced by a directive factory."""

    def __init__(self, platform: str, key: str, handler: DirectiveHandler) -> None:
        self.platform = platform
        self.key = key
        self._handler = handler

    async def apply(self, reply: "Reply", event: "Event", transition: "Transition") -> None:
        await self._handler(reply, event, transition)


async def render_view(
    event: "Event", view: str, params: Optional[Mapping[str, Any]] = None
) -> Any:
    """Render a view through the event's renderer, normalizing failures."""
    try:
        return await event.renderer.render_path(view, event, params)
    except ContentResolutionError:
        raise
    except Exception as exc:
        raise ContentResolutionError(f"Unable to render view '{view}': {exc}") from exc
