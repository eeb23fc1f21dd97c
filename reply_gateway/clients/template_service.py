from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx

from reply_gateway.core.config import settings
from reply_gateway.core.errors import ContentResolutionError
from reply_gateway.services.renderer import Renderer

if TYPE_CHECKING:
    from reply_gateway.platforms.base import Event

logger = logging.getLogger(__name__)


class TemplateServiceRenderer(Renderer):
    """Renderer backed by an external template service over HTTP."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url or settings.template_service_url
        if not self._base_url:
            raise ValueError("TEMPLATE_SERVICE_URL is not configured.")

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout or settings.template_service_timeout),
            headers=headers,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def render_path(
        self,
        view: str,
        event: "Event",
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        POST the view and turn context to ``/render`` and return ``content``.

        Transport errors, non-2xx answers and bodies without ``content`` are
        reported as ContentResolutionError.
        """
        request_body = {
            "view": view,
            "locale": event.locale,
            "platform": event.platform,
            "intent": (
                {"name": event.intent.name, "params": event.intent.params}
                if event.intent
                else None
            ),
            "params": dict(params or {}),
        }
        try:
            response = await self._client.post("/render", json=request_body)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Template service failed to render %s: %s", view, exc)
            raise ContentResolutionError(f"Template service could not render '{view}': {exc}") from exc

        if not isinstance(body, Mapping) or "content" not in body:
            raise ContentResolutionError(f"Template service returned no content for '{view}'")
        return body["content"]
