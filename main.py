import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from restmeta.config import Settings, settings
from restmeta.database import Base, engine
from restmeta.exception_handlers import register_exception_handlers
from restmeta.fields.custom_meta import register_custom_meta
from restmeta.fields.registry import FieldRegistry
from restmeta.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from restmeta.routes import auth, fields, posts

logger = logging.getLogger(__name__)


async def root():
    return {"message": "Welcome to the RestMeta API"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up the application...")
    if app.state.settings.debug:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created (if not existing).")
    yield
    logger.info("Shutting down the application...")
    await engine.dispose()


def create_app(app_settings: Settings | None = None, registry: FieldRegistry | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        app_settings: Settings to build the app from (defaults to the environment).
        registry: Pre-built field registry. When omitted a fresh registry is
            created and the configured custom meta field is registered on it.
    """
    app_settings = app_settings or settings
    setup_structured_logging(app_settings.log_level, json_format=app_settings.log_json)

    if registry is None:
        registry = FieldRegistry()
        register_custom_meta(registry, app_settings)

    app = FastAPI(
        title=app_settings.app_name,
        description="Content API with registrable metadata fields",
        debug=app_settings.debug,
        version=app_settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.field_registry = registry

    app.add_middleware(StructuredLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(posts.router, prefix="/api/v1", tags=["Posts"])
    app.include_router(fields.router, prefix="/api/v1", tags=["Fields"])
    app.add_api_route("/", root, methods=["GET"], tags=["Root"])

    logger.info(f"Running in {app_settings.environment} mode with {len(registry)} registered field(s)")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
