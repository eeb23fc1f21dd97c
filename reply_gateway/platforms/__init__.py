from __future__ import annotations

from typing import Dict, NamedTuple, Type

from reply_gateway.core.errors import UnknownPlatformError

from .alexa import ALEXA, AlexaEvent, AlexaReply
from .base import DeviceCapabilities, Event, Intent, Reply, Transition
from .dialogflow import DIALOGFLOW, DialogFlowEvent, DialogFlowReply


class PlatformAdapter(NamedTuple):
    """Event/Reply pair for one assistant platform."""

    event_cls: Type[Event]
    reply_cls: Type[Reply]


PLATFORM_ADAPTERS: Dict[str, PlatformAdapter] = {
    ALEXA: PlatformAdapter(AlexaEvent, AlexaReply),
    DIALOGFLOW: PlatformAdapter(DialogFlowEvent, DialogFlowReply),
}


def get_platform_adapter(platform: str) -> PlatformAdapter:
    adapter = PLATFORM_ADAPTERS.get(platform)
    if adapter is None:
        raise UnknownPlatformError(f"Platform '{platform}' is not supported.")
    return adapter


__all__ = [
    "ALEXA",
    "DIALOGFLOW",
    "AlexaEvent",
    "AlexaReply",
    "DeviceCapabilities",
    "DialogFlowEvent",
    "DialogFlowReply",
    "Event",
    "Intent",
    "PLATFORM_ADAPTERS",
    "PlatformAdapter",
    "Reply",
    "Transition",
    "get_platform_adapter",
]
