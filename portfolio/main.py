import asyncio
import logging

from fastapi import FastAPI

from portfolio.core.cache import MemoryCache
from portfolio.core.config import settings
from portfolio.routers import api

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def _cleanup_loop(cache: MemoryCache, interval: float):
    """Sweep expired cache entries every `interval` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            removed = cache.cleanup()
            if removed:
                logger.info(f"Cache sweep removed {removed} expired entries")
        except Exception as e:
            logger.error(f"Cache sweep failed: {e}")


def create_app(cache: MemoryCache | None = None, cleanup_interval: float | None = None) -> FastAPI:
    """Build the app around its own cache instance."""
    app = FastAPI(title=settings.PROJECT_NAME)
    app.state.cache = cache if cache is not None else MemoryCache(settings.CACHE_TTL_MINUTES)
    app.state.cleanup_task = None
    app.include_router(api.router)

    interval = settings.CACHE_CLEANUP_INTERVAL_SECONDS if cleanup_interval is None else cleanup_interval

    @app.on_event("startup")
    async def on_startup():
        if interval > 0:
            app.state.cleanup_task = asyncio.create_task(_cleanup_loop(app.state.cache, interval))
        else:
            logger.info("Cache cleanup interval is 0, background sweep disabled")

    @app.on_event("shutdown")
    async def on_shutdown():
        task = app.state.cleanup_task
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            app.state.cleanup_task = None

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/")
    async def root():
        return {"message": f"{settings.PROJECT_NAME} is running"}

    return app


app = create_app()
