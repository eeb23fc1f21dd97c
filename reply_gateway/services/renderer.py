from __future__ import annotations

import inspect
import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Union

from reply_gateway.core.errors import ContentResolutionError

if TYPE_CHECKING:
    from reply_gateway.platforms.base import Event

logger = logging.getLogger(__name__)

VariableResolver = Callable[["Event"], Union[Any, Awaitable[Any]]]

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class Renderer(ABC):
    """Resolves a view path into content for the current turn."""

    @abstractmethod
    async def render_path(
        self,
        view: str,
        event: "Event",
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Return rendered content or raise ContentResolutionError."""


class ViewsRenderer(Renderer):
    """
    Renders views from an in-memory, locale-keyed tree.

    ``views`` looks like ``{"en-US": {"Card": {"Welcome": {...}}}}`` and view
    paths are dotted (``"Card.Welcome"``). Strings anywhere in the selected
    view may contain ``{name}`` placeholders, filled from the render
    ``params``, then the registered ``variables``, then the intent slots.
    A string made of a single placeholder keeps the value's own type.

    The renderer holds no per-turn state and is safe to share across turns.
    """

    def __init__(
        self,
        views: Mapping[str, Mapping[str, Any]],
        *,
        variables: Optional[Mapping[str, VariableResolver]] = None,
        default_locale: str = "en-US",
    ) -> None:
        self._views = views
        self._variables = dict(variables or {})
        self._default_locale = default_locale

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs: Any) -> "ViewsRenderer":
        """Load views from a JSON file. A missing file yields an empty view tree."""
        views_path = Path(path)
        if not views_path.exists():
            logger.warning("Views file %s not found, starting with no views", views_path)
            return cls({}, **kwargs)
        with views_path.open(encoding="utf-8") as handle:
            return cls(json.load(handle), **kwargs)

    async def render_path(
        self,
        view: str,
        event: "Event",
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        content = self._lookup(view, event.locale)
        return await self._render(content, event, params or {})

    def _lookup(self, view: str, locale: Optional[str]) -> Any:
        for candidate in dict.fromkeys(filter(None, (locale, self._default_locale))):
            node: Any = self._views.get(candidate)
            for part in view.split("."):
                if not isinstance(node, Mapping) or part not in node:
                    node = None
                    break
                node = node[part]
            if node is not None:
                return node
        raise ContentResolutionError(
            f"View '{view}' not found for locale '{locale or self._default_locale}'"
        )

    async def _render(self, content: Any, event: "Event", params: Mapping[str, Any]) -> Any:
        if isinstance(content, str):
            return await self._render_string(content, event, params)
        if isinstance(content, Mapping):
            return {key: await self._render(value, event, params) for key, value in content.items()}
        if isinstance(content, list):
            return [await self._render(item, event, params) for item in content]
        return content

    async def _render_string(self, text: str, event: "Event", params: Mapping[str, Any]) -> Any:
        names = _PLACEHOLDER.findall(text)
        if not names:
            return text

        values: Dict[str, Any] = {}
        for name in names:
            if name not in values:
                values[name] = await self._resolve_variable(name, event, params)

        whole = _PLACEHOLDER.fullmatch(text)
        if whole:
            return values[whole.group(1)]
        return _PLACEHOLDER.sub(lambda match: str(values[match.group(1)]), text)

    async def _resolve_variable(self, name: str, event: "Event", params: Mapping[str, Any]) -> Any:
        if name in params:
            return params[name]
        resolver = self._variables.get(name)
        if resolver is not None:
            value = resolver(event)
            if inspect.isawaitable(value):
                value = await value
            return value
        if event.intent is not None and event.intent.params.get(name) is not None:
            return event.intent.params[name]
        raise ContentResolutionError(f"Variable '{name}' is not defined")
