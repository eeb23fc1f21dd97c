from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from pydantic import ValidationError

from reply_gateway.core.errors import (
    DirectiveConfigurationError,
    DirectiveError,
    DirectiveUsageError,
)
from reply_gateway.directives.registry import DIRECTIVE_REGISTRY, DirectiveRegistry
from reply_gateway.directives.types import Directive
from reply_gateway.platforms.base import Event, Reply, Transition
from reply_gateway.schemas.directives import DirectiveDescriptor

logger = logging.getLogger(__name__)


class DirectiveEngine:
    """Applies a transition's directives to a reply, in order, one at a time."""

    def __init__(self, registry: Optional[DirectiveRegistry] = None) -> None:
        self._registry = registry or DIRECTIVE_REGISTRY

    def resolve(
        self,
        platform: str,
        entries: Sequence[Union[DirectiveDescriptor, Directive]],
    ) -> List[Directive]:
        """
        Build the directives that fire on ``platform``.

        Entries registered only for other platforms are dropped. A key no
        platform knows, or arguments that do not fit the implementation,
        fail here, before anything touches the reply.
        """
        resolved: List[Directive] = []
        for entry in entries:
            if isinstance(entry, Directive):
                if entry.platform == platform:
                    resolved.append(entry)
                else:
                    self._log_skip(entry.key, entry.platform, platform)
                continue

            if not self._registry.platforms_for(entry.key):
                raise DirectiveConfigurationError(
                    f"No directive registered for key '{entry.key}' on any platform"
                )
            if entry.platform and entry.platform != platform:
                self._log_skip(entry.key, entry.platform, platform)
                continue
            if self._registry.lookup(platform, entry.key) is None:
                self._log_skip(entry.key, ",".join(self._registry.platforms_for(entry.key)), platform)
                continue
            resolved.append(self._registry.build(platform, entry))
        return resolved

    async def apply(self, reply: Reply, event: Event, transition: Transition) -> int:
        """Apply every directive for the reply's platform; return how many ran."""
        directives = self.resolve(reply.platform, transition.directives)
        for directive in directives:
            try:
                await directive.apply(reply, event, transition)
            except ValidationError as exc:
                # Entry models reject content the directive passed through unchecked.
                error = DirectiveUsageError(
                    f"Directive {directive.key} produced an invalid entry: {exc}"
                )
                self._log_failure(directive, error)
                raise error from exc
            except DirectiveError as exc:
                self._log_failure(directive, exc)
                raise
            logger.debug("Applied directive %s", directive.key, extra={"directive": directive.key})
        return len(directives)

    @staticmethod
    def _log_failure(directive: Directive, exc: DirectiveError) -> None:
        logger.warning(
            "Directive %s failed: %s",
            directive.key,
            exc,
            extra={"directive": directive.key, "error_kind": exc.kind},
        )

    @staticmethod
    def _log_skip(key: str, target: str, platform: str) -> None:
        logger.debug(
            "Skipping directive %s (targets %s, reply is %s)", key, target, platform
        )
