from __future__ import annotations

import inspect
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

from pydantic import ValidationError

from reply_gateway.core.errors import DirectiveConfigurationError, DirectiveUsageError
from reply_gateway.directives.types import Directive, DirectiveHandler, HandlerDirective
from reply_gateway.schemas.directives import DirectiveDescriptor

logger = logging.getLogger(__name__)

DirectiveFactory = Callable[..., Directive]
D = TypeVar("D", bound=Type[Directive])


class DirectiveRegistry:
    """
    Maps ``(platform, key)`` to a directive constructor.

    Classes register through the ``directive`` decorator; closure factories
    register through ``handler`` and are wrapped in ``HandlerDirective`` so
    both shapes build the same ``Directive`` interface.
    """

    def __init__(self) -> None:
        self._factories: Dict[Tuple[str, str], DirectiveFactory] = {}
        self._signatures: Dict[Tuple[str, str], inspect.Signature] = {}

    def register(
        self,
        platform: str,
        key: str,
        factory: DirectiveFactory,
        *,
        signature: Optional[inspect.Signature] = None,
    ) -> None:
        if not platform or not key:
            raise DirectiveConfigurationError("Directives need both a platform and a key")
        if (platform, key) in self._factories:
            raise DirectiveConfigurationError(
                f"Directive '{key}' is already registered for platform '{platform}'"
            )
        self._factories[(platform, key)] = factory
        self._signatures[(platform, key)] = signature or inspect.signature(factory)
        logger.debug("Registered directive %s:%s", platform, key)

    def directive(self, cls: D) -> D:
        """Class decorator registering a Directive subclass under its platform/key."""
        self.register(cls.platform, cls.key, cls)
        return cls

    def handler(
        self, platform: str, key: str
    ) -> Callable[[Callable[..., DirectiveHandler]], Callable[..., DirectiveHandler]]:
        """Decorator registering a factory that returns an apply closure."""

        def decorator(fn: Callable[..., DirectiveHandler]) -> Callable[..., DirectiveHandler]:
            def build(*args, **kwargs) -> Directive:
                return HandlerDirective(platform, key, fn(*args, **kwargs))

            self.register(platform, key, build, signature=inspect.signature(fn))
            return fn

        return decorator

    def lookup(self, platform: str, key: str) -> Optional[DirectiveFactory]:
        return self._factories.get((platform, key))

    def platforms_for(self, key: str) -> List[str]:
        """Return every platform that registered ``key``."""
        return sorted(platform for platform, name in self._factories if name == key)

    def keys(self, platform: Optional[str] = None) -> List[str]:
        return sorted(
            name for plat, name in self._factories if platform is None or plat == platform
        )

    def build(self, platform: str, descriptor: DirectiveDescriptor) -> Directive:
        """Construct the implementation registered for the descriptor on ``platform``."""
        factory = self.lookup(platform, descriptor.key)
        if factory is None:
            raise DirectiveConfigurationError(
                f"Directive '{descriptor.key}' is not registered for platform '{platform}'"
            )
        signature = self._signatures[(platform, descriptor.key)]
        try:
            signature.bind(*descriptor.args, **descriptor.kwargs)
        except TypeError as exc:
            raise DirectiveUsageError(
                f"Invalid arguments for directive '{descriptor.key}': {exc}"
            ) from exc
        try:
            return factory(*descriptor.args, **descriptor.kwargs)
        except ValidationError as exc:
            raise DirectiveUsageError(
                f"Invalid arguments for directive '{descriptor.key}': {exc}"
            ) from exc

    def validate(self, descriptors: Iterable[DirectiveDescriptor]) -> None:
        """Fail eagerly on descriptors whose key no platform has registered."""
        unknown = [d.key for d in descriptors if not self.platforms_for(d.key)]
        if unknown:
            raise DirectiveConfigurationError(
                f"No directive registered for key(s): {', '.join(unknown)}"
            )

    def __contains__(self, item: Tuple[str, str]) -> bool:
        return item in self._factories

    def __len__(self) -> int:
        return len(self._factories)


DIRECTIVE_REGISTRY = DirectiveRegistry()
