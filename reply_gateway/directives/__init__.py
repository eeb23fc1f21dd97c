from __future__ import annotations

from typing import Dict, List

from reply_gateway.core.errors import (
    ContentResolutionError,
    ContentShapeError,
    DirectiveConfigurationError,
    DirectiveError,
    DirectiveUsageError,
    ExclusivityError,
)

# Importing the platform modules registers their directives.
from . import alexa, dialogflow  # noqa: F401
from .engine import DirectiveEngine
from .registry import DIRECTIVE_REGISTRY, DirectiveRegistry
from .types import Directive, DirectiveHandler, HandlerDirective, render_view


def directive_catalog() -> Dict[str, List[str]]:
    """Return the registered directive keys grouped by platform."""
    catalog: Dict[str, List[str]] = {}
    for key in DIRECTIVE_REGISTRY.keys():
        for platform in DIRECTIVE_REGISTRY.platforms_for(key):
            catalog.setdefault(platform, []).append(key)
    return {platform: sorted(set(keys)) for platform, keys in sorted(catalog.items())}


__all__ = [
    "ContentResolutionError",
    "ContentShapeError",
    "DIRECTIVE_REGISTRY",
    "Directive",
    "DirectiveConfigurationError",
    "DirectiveEngine",
    "DirectiveError",
    "DirectiveHandler",
    "DirectiveRegistry",
    "DirectiveUsageError",
    "ExclusivityError",
    "HandlerDirective",
    "directive_catalog",
    "render_view",
]
