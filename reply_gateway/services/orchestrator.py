import logging
import time
from typing import Optional

from reply_gateway.core.errors import DirectiveError
from reply_gateway.core.logging import bind_platform, reset_platform
from reply_gateway.directives import DirectiveEngine, render_view
from reply_gateway.platforms import Event, Reply, Transition, get_platform_adapter
from reply_gateway.schemas.inbound import TurnRequest
from reply_gateway.schemas.responses import TurnResponse
from reply_gateway.services.renderer import Renderer

logger = logging.getLogger(__name__)


class TurnOrchestrator:
    """Builds the platform reply for one turn from the dialog engine's transition."""

    def __init__(
        self,
        *,
        renderer: Renderer,
        engine: Optional[DirectiveEngine] = None,
    ) -> None:
        self._renderer = renderer
        self._engine = engine or DirectiveEngine()

    async def handle_turn(self, platform: str, payload: TurnRequest) -> TurnResponse:
        """
        Main entry point for a turn.

        Raises UnknownPlatformError for unsupported platforms and lets
        DirectiveError subclasses propagate so the caller can report them.
        """
        adapter = get_platform_adapter(platform)
        token = bind_platform(platform)
        start_time = time.perf_counter()
        try:
            event = adapter.event_cls.from_raw(payload.event, self._renderer)
            reply = adapter.reply_cls.for_event(event)
            transition = Transition.from_payload(payload.transition)

            applied = await self.build_reply(reply, event, transition)
            # Serialization can still reject entries the wire format cannot hold.
            wire_payload = reply.to_payload()
        except DirectiveError as exc:
            logger.warning(
                "Turn failed with %s: %s",
                exc.kind,
                exc,
                extra={"error_kind": exc.kind},
            )
            raise
        finally:
            reset_platform(token)

        logger.info(
            "turn completed",
            extra={
                "intent": event.intent.name if event.intent else None,
                "directives_applied": applied,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )
        return TurnResponse(
            platform=platform,
            directives_applied=applied,
            payload=wire_payload,
        )

    async def build_reply(self, reply: Reply, event: Event, transition: Transition) -> int:
        """Render speech, apply directives and close the reply; return directives applied."""
        for view in transition.say:
            reply.add_statement(str(await render_view(event, view)))
        for view in transition.reprompt:
            reply.add_reprompt(str(await render_view(event, view)))

        applied = await self._engine.apply(reply, event, transition)

        if transition.flow == "terminate":
            reply.terminate()
        return applied
