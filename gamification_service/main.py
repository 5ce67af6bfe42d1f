"""Gamification Service API - hearts and daily streak"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gamification_service.core.config import get_settings
from gamification_service.core.db import close_db, init_db
from gamification_service.middleware import setup_middleware
from gamification_service.routers import hearts, learning, streak

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info(f"{settings.APP_NAME} {settings.VERSION} started ({settings.ENVIRONMENT})")
    yield
    await close_db()


def create_app(use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="Gamification Service API",
        description="Hearts budget and daily streak for learning content",
        version=settings.VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan if use_lifespan else None,
    )
    setup_middleware(app, settings.CORS_ORIGINS)

    app.include_router(hearts.router, prefix="/api")
    app.include_router(streak.router, prefix="/api")
    app.include_router(learning.router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": settings.APP_NAME, "version": settings.VERSION}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8002)
