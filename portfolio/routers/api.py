import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from portfolio.core.cache import MemoryCache
from portfolio.core.config import settings
from portfolio.models.schemas import CacheStats, ProjectSummary
from portfolio.services.github_service import (
    GitHubUnavailable,
    InvalidRepositoryURL,
    get_github_projects,
)

router = APIRouter(prefix="/api", tags=["api"])
logger = logging.getLogger(__name__)


def get_cache(request: Request) -> MemoryCache:
    return request.app.state.cache


@router.get("/projects", response_model=List[ProjectSummary])
async def list_projects(
    repo: Optional[List[str]] = Query(None, description="Repository URLs, overrides FEATURED_REPOS"),
    cache: MemoryCache = Depends(get_cache),
):
    repo_urls = repo or settings.featured_repo_urls
    try:
        return await get_github_projects(cache, repo_urls)
    except InvalidRepositoryURL as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GitHubUnavailable as e:
        logger.warning(f"Serving uncached fallback projects: {e}")
        return e.projects


@router.get("/cache/stats", response_model=CacheStats)
async def cache_stats(cache: MemoryCache = Depends(get_cache)):
    return cache.get_stats()


@router.post("/cache/cleanup")
async def cache_cleanup(cache: MemoryCache = Depends(get_cache)):
    removed = cache.cleanup()
    return {"removed": removed}


@router.delete("/cache")
async def cache_clear(cache: MemoryCache = Depends(get_cache)):
    cache.clear()
    logger.info("Cache cleared")
    return {"status": "ok"}
