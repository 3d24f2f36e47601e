from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from authgate.app import App
from authgate.config import Config
from authgate.errors import DeliveryError, TransientStoreError, UserError
from authgate.web.error_handlers import general_exception_handler, unavailable_error_handler, user_error_handler
from authgate.web.openapi import set_custom_openapi
from authgate.web.routers import auth_router, profile_router, users_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="AuthGate API",
        lifespan=lifespan,
        openapi_tags=[],
    )
    # Available before lifespan runs so tests can drive the app without startup
    app.state.app = app_instance
    app.state.config = config

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        await app_instance.is_healthy()
        return {"status": "healthy"}

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(profile_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(TransientStoreError, unavailable_error_handler)
    app.add_exception_handler(DeliveryError, unavailable_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
