from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List, Union

from reply_gateway.core.errors import ContentShapeError
from reply_gateway.directives.registry import DIRECTIVE_REGISTRY
from reply_gateway.directives.types import DirectiveHandler, render_view
from reply_gateway.platforms.base import Event, Reply, Transition
from reply_gateway.platforms.dialogflow import (
    DIALOGFLOW,
    OPTION_VALUE_SPEC_TYPE,
    BasicCardEntry,
    CarouselSelectEntry,
    ListSelectEntry,
    PossibleIntents,
    SuggestionsEntry,
    SystemIntent,
)


async def _resolve_object(template: Union[str, Mapping], event: Event, label: str) -> Dict[str, Any]:
    content = await render_view(event, template) if isinstance(template, str) else template
    if not isinstance(content, Mapping):
        raise ContentShapeError(f"{label} content must be an object, got {type(content).__name__}")
    return dict(content)


@DIRECTIVE_REGISTRY.handler(DIALOGFLOW, "List")
def list_select(template_path: Union[str, Mapping]) -> DirectiveHandler:
    async def apply(reply: Reply, event: Event, transition: Transition) -> None:
        content = await _resolve_object(template_path, event, "List")
        reply.add_directive(
            ListSelectEntry(
                possible_intents=PossibleIntents(
                    input_value_data={
                        "@type": OPTION_VALUE_SPEC_TYPE,
                        "listSelect": content,
                    }
                )
            )
        )

    return apply


@DIRECTIVE_REGISTRY.handler(DIALOGFLOW, "Carousel")
def carousel(template_path: Union[str, Mapping]) -> DirectiveHandler:
    async def apply(reply: Reply, event: Event, transition: Transition) -> None:
        carousel_select = await _resolve_object(template_path, event, "Carousel")
        reply.add_directive(
            CarouselSelectEntry(
                system_intent=SystemIntent(
                    spec={"optionValueSpec": {"carouselSelect": carousel_select}}
                )
            )
        )

    return apply


@DIRECTIVE_REGISTRY.handler(DIALOGFLOW, "Suggestions")
def suggestions(chips: Union[str, List[str]]) -> DirectiveHandler:
    """A view path rendering to a list of chips, or the list itself."""

    async def apply(reply: Reply, event: Event, transition: Transition) -> None:
        items = await render_view(event, chips) if isinstance(chips, str) else chips
        if isinstance(items, str):
            items = [items]
        if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
            raise ContentShapeError("Suggestions must be a list of strings")
        reply.add_directive(SuggestionsEntry(suggestions=list(items)))

    return apply


@DIRECTIVE_REGISTRY.handler(DIALOGFLOW, "BasicCard")
def basic_card(template_path: Union[str, Mapping]) -> DirectiveHandler:
    async def apply(reply: Reply, event: Event, transition: Transition) -> None:
        content = await _resolve_object(template_path, event, "BasicCard")
        reply.add_directive(BasicCardEntry(basic_card=content))

    return apply
