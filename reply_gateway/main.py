from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from reply_gateway.api.routes import health as health_routes
from reply_gateway.api.routes import turns as turn_routes
from reply_gateway.core.config import settings
from reply_gateway.core.errors import (
    DirectiveConfigurationError,
    DirectiveError,
    UnknownPlatformError,
)
from reply_gateway.core.logging import configure_logging
from reply_gateway.core.middleware import RequestLoggingMiddleware


async def _directive_error_handler(request: Request, exc: DirectiveError) -> JSONResponse:
    status_code = (
        status.HTTP_500_INTERNAL_SERVER_ERROR
        if isinstance(exc, DirectiveConfigurationError)
        else status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    return JSONResponse(
        status_code=status_code, content={"error": exc.kind, "detail": str(exc)}
    )


async def _unknown_platform_handler(request: Request, exc: UnknownPlatformError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "unknown_platform", "detail": str(exc)},
    )


def create_app() -> FastAPI:
    """FastAPI application factory."""
    configure_logging()
    app = FastAPI(title=settings.app_name, version=settings.version)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(DirectiveError, _directive_error_handler)
    app.add_exception_handler(UnknownPlatformError, _unknown_platform_handler)

    app.include_router(health_routes.router, prefix="/health", tags=["health"])
    app.include_router(turn_routes.router, prefix="/v1", tags=["turns"])

    return app


app = create_app()
