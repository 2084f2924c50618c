import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contenthub.config import settings
from contenthub.exception_handlers import register_exception_handlers
from contenthub.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from contenthub.middleware.rate_limit import configure_rate_limiting
from contenthub.routes import admin_classes, admin_galleries, admin_news, comments, content, engagement
from contenthub.utils.storage import create_storage

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    setup_structured_logging(
        log_level="DEBUG" if settings.debug else "INFO",
        json_format=settings.environment != "development",
    )

    app = FastAPI(
        title=settings.app_name,
        description="Content backend for classes, galleries and news",
        debug=settings.debug,
        version=settings.app_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    configure_rate_limiting(app)
    register_exception_handlers(app)

    app.include_router(content.router)
    app.include_router(comments.router)
    app.include_router(engagement.router)
    app.include_router(admin_classes.router)
    app.include_router(admin_galleries.router)
    app.include_router(admin_news.router)

    app.state.storage = create_storage()

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "version": settings.app_version}

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
