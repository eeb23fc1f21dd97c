from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from reply_gateway.core.errors import (
    ContentShapeError,
    DirectiveUsageError,
    ExclusivityError,
)
from reply_gateway.directives.registry import DIRECTIVE_REGISTRY
from reply_gateway.directives.types import Directive, render_view
from reply_gateway.platforms.alexa import (
    ALEXA,
    AudioItem,
    AudioPlayEntry,
    AudioStopEntry,
    AudioStream,
    DialogDelegateEntry,
    HintEntry,
    PlainTextHint,
    PlayBehavior,
    RenderTemplateEntry,
    SlotUpdate,
    UpdatedIntent,
    VideoItem,
    VideoLaunchEntry,
    VideoMetadata,
)
from reply_gateway.platforms.base import Event, Reply, Transition
from reply_gateway.schemas.cards import Card, LinkAccountCard, is_card, parse_card

logger = logging.getLogger(__name__)

CARD = "card"
HINT = "Hint"
RENDER_TEMPLATE = "Display.RenderTemplate"
AUDIO_PLAY = "AudioPlayer.Play"
VIDEO_LAUNCH = "VideoApp.Launch"


@DIRECTIVE_REGISTRY.directive
class HomeCard(Directive):
    """Sets the reply's card from a view path or an already-built card."""

    platform = ALEXA
    key = "alexaCard"

    def __init__(self, view_path: Union[str, Card, Mapping]) -> None:
        self.view_path = view_path

    async def apply(self, reply: Reply, event: Event, transition: Transition) -> None:
        if reply.has_directive(CARD):
            raise ExclusivityError("At most one card can be specified in a response")

        if isinstance(self.view_path, str):
            card = await render_view(event, self.view_path)
            if not is_card(card):
                raise ContentShapeError(
                    f"The view '{self.view_path}' should return a Card like object"
                )
        elif is_card(self.view_path):
            card = self.view_path
        else:
            raise ContentShapeError("Argument should be a viewPath or a Card like object")

        reply.set_card(parse_card(card))


@DIRECTIVE_REGISTRY.directive
class AccountLinkingCard(Directive):
    platform = ALEXA
    key = "alexaAccountLinkingCard"

    async def apply(self, reply: Reply, event: Event, transition: Transition) -> None:
        if reply.has_directive(CARD):
            raise ExclusivityError("At most one card can be specified in a response")
        reply.set_card(LinkAccountCard())


@DIRECTIVE_REGISTRY.directive
class Hint(Directive):
    platform = ALEXA
    key = "alexaHint"

    def __init__(self, view_path: str) -> None:
        if not isinstance(view_path, str):
            raise DirectiveUsageError(f"{self.key} takes a view path, got {view_path!r}")
        self.view_path = view_path

    async def apply(self, reply: Reply, event: Event, transition: Transition) -> None:
        if reply.has_directive(HINT):
            raise ExclusivityError("At most one Hint directive can be specified in a response")

        text = await render_view(event, self.view_path)
        if not isinstance(text, str):
            raise ContentShapeError(f"The view '{self.view_path}' should return text")
        reply.add_directive(HintEntry(hint=PlainTextHint(text=text)))


@DIRECTIVE_REGISTRY.directive
class DialogDelegate(Directive):
    """
    Lets Alexa drive slot filling for the current intent.

    ``slots`` maps slot names to literal values, or to None to have Alexa
    ask the user for them. Values are passed through without rendering.
    """

    platform = ALEXA
    key = "alexaDialogDelegate"

    def __init__(self, slots: Optional[Dict[str, Any]] = None) -> None:
        if slots is not None and not isinstance(slots, Mapping):
            raise DirectiveUsageError(
                f"Slots must map slot names to values, got {type(slots).__name__}"
            )
        self.slots = slots

    async def apply(self, reply: Reply, event: Event, transition: Transition) -> None:
        if event.intent is None:
            raise DirectiveUsageError("An intent is required")

        updated_intent = None
        if self.slots:
            updated_intent = UpdatedIntent(
                name=event.intent.name,
                slots={
                    name: SlotUpdate(name=name, value=value)
                    for name, value in self.slots.items()
                },
            )
        reply.add_directive(DialogDelegateEntry(updated_intent=updated_intent))


@DIRECTIVE_REGISTRY.directive
class RenderTemplate(Directive):
    platform = ALEXA
    key = "alexaRenderTemplate"

    def __init__(self, view_path: Union[str, Mapping], token: Optional[str] = None) -> None:
        self.view_path: Optional[str] = None
        self.template: Optional[Mapping] = None
        if isinstance(view_path, str):
            self.view_path = view_path
        else:
            self.template = view_path
        self.token = token

    async def apply(self, reply: Reply, event: Event, transition: Transition) -> None:
        if not event.capabilities.display:
            logger.debug("Device has no display, skipping %s", self.key)
            return
        if reply.has_directive(RENDER_TEMPLATE):
            raise ExclusivityError(
                "At most one Display.RenderTemplate directive can be specified in a response"
            )

        if self.view_path:
            template = await render_view(event, self.view_path, {"token": self.token})
        else:
            template = self.template

        if not isinstance(template, Mapping):
            raise ContentShapeError("A Display.RenderTemplate needs a template object")
        # Views may return the whole directive or just its template body.
        if template.get("type") == RENDER_TEMPLATE and "template" in template:
            template = template["template"]
        reply.add_directive(RenderTemplateEntry(template=dict(template)))


@DIRECTIVE_REGISTRY.directive
class PlayAudio(Directive):
    platform = ALEXA
    key = "alexaPlayAudio"

    def __init__(
        self,
        url: str,
        token: str,
        offset_in_milliseconds: int = 0,
        behavior: Union[str, PlayBehavior] = PlayBehavior.REPLACE_ALL,
    ) -> None:
        try:
            self.behavior = PlayBehavior(behavior)
        except ValueError as exc:
            raise DirectiveUsageError(f"Unknown play behavior '{behavior}'") from exc
        try:
            self.stream = AudioStream(
                url=url, token=token, offset_in_milliseconds=offset_in_milliseconds
            )
        except ValidationError as exc:
            raise DirectiveUsageError(f"Invalid audio stream for {self.key}: {exc}") from exc

    async def apply(self, reply: Reply, event: Event, transition: Transition) -> None:
        if reply.has_directive(VIDEO_LAUNCH):
            raise ExclusivityError(
                "Do not include both an AudioPlayer.Play directive and a "
                "VideoApp.Launch directive in the same response"
            )

        reply.add_directive(
            AudioPlayEntry(play_behavior=self.behavior, audio_item=AudioItem(stream=self.stream))
        )


@DIRECTIVE_REGISTRY.directive
class StopAudio(Directive):
    platform = ALEXA
    key = "alexaStopAudio"

    async def apply(self, reply: Reply, event: Event, transition: Transition) -> None:
        reply.add_directive(AudioStopEntry())


@DIRECTIVE_REGISTRY.directive
class VideoLaunch(Directive):
    platform = ALEXA
    key = "alexaVideoLaunch"

    def __init__(
        self, source: str, title: Optional[str] = None, subtitle: Optional[str] = None
    ) -> None:
        metadata = None
        try:
            if title or subtitle:
                metadata = VideoMetadata(title=title, subtitle=subtitle)
            self.video_item = VideoItem(source=source, metadata=metadata)
        except ValidationError as exc:
            raise DirectiveUsageError(f"Invalid video item for {self.key}: {exc}") from exc

    async def apply(self, reply: Reply, event: Event, transition: Transition) -> None:
        if not event.capabilities.video:
            logger.debug("Device has no VideoApp interface, skipping %s", self.key)
            return
        if reply.has_directive(AUDIO_PLAY):
            raise ExclusivityError(
                "Do not include both an AudioPlayer.Play directive and a "
                "VideoApp.Launch directive in the same response"
            )

        reply.add_directive(VideoLaunchEntry(video_item=self.video_item))
