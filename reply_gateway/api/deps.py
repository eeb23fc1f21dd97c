from typing import Optional

from reply_gateway.clients.template_service import TemplateServiceRenderer
from reply_gateway.core.config import settings
from reply_gateway.services.orchestrator import TurnOrchestrator
from reply_gateway.services.renderer import Renderer, ViewsRenderer


_renderer: Optional[Renderer] = None
_orchestrator: Optional[TurnOrchestrator] = None


def build_renderer() -> Renderer:
    """Factory for the renderer selected by RENDERER_BACKEND."""
    backend = settings.renderer_backend.lower()
    if backend == "http":
        return TemplateServiceRenderer()
    if backend == "views":
        return ViewsRenderer.from_file(
            settings.views_path, default_locale=settings.default_locale
        )
    raise ValueError(f"Unsupported RENDERER_BACKEND '{settings.renderer_backend}'.")


async def get_renderer() -> Renderer:
    """Provide the shared, read-only renderer instance."""
    global _renderer
    if _renderer is None:
        _renderer = build_renderer()
    return _renderer


async def get_orchestrator() -> TurnOrchestrator:
    """Provide a shared orchestrator wired with dependencies."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = TurnOrchestrator(renderer=await get_renderer())
    return _orchestrator
