import asyncio
import logging
from typing import List, Optional
from urllib.parse import urlparse

import httpx

from portfolio.core.cache import MemoryCache, build_cache_key, hash_cache_key
from portfolio.core.config import settings
from portfolio.models.schemas import GitHubRepoResponse, ProjectSummary

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Repository details are currently unavailable."
MISSING_DESCRIPTION = "Repository is private or does not exist."
EMPTY_DESCRIPTION = "No description provided yet."


class InvalidRepositoryURL(ValueError):
    """URL does not point at an owner/repo path."""


class GitHubUnavailable(Exception):
    """Some repositories could not be loaded. `projects` holds the list with fallbacks."""

    def __init__(self, projects: List[ProjectSummary], failed: int):
        super().__init__(f"GitHub unavailable for {failed} of {len(projects)} repositories")
        self.projects = projects
        self.failed = failed


def create_github_headers(token: Optional[str] = None) -> dict:
    """Headers for the GitHub REST API. Adds a bearer token when one is configured."""
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": settings.GITHUB_USER_AGENT,
        "X-GitHub-Api-Version": settings.GITHUB_API_VERSION,
    }
    token = settings.GITHUB_TOKEN if token is None else token
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def parse_repository_slug(url: str) -> tuple[str, str]:
    """Extract (owner, repo) from a repository URL like https://github.com/owner/repo(.git)."""
    segments = [s for s in urlparse(url).path.split("/") if s]
    if len(segments) < 2:
        raise InvalidRepositoryURL(f"Invalid GitHub repository URL: {url}")
    owner, repo = segments[0], segments[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return owner, repo


def fallback_project(url: str, repo: str, description: Optional[str] = None) -> ProjectSummary:
    return ProjectSummary(
        name=repo,
        description=description or DEFAULT_DESCRIPTION,
        stars=0,
        topics=[],
        languages=[],
        url=url,
    )


async def _fetch_languages(client: httpx.AsyncClient, languages_url: str, headers: dict) -> tuple[List[str], bool]:
    """Languages ordered by byte count, largest first, and whether the request succeeded."""
    try:
        resp = await client.get(languages_url, headers=headers)
        resp.raise_for_status()
        data: dict = resp.json()
        return [name for name, _ in sorted(data.items(), key=lambda item: item[1], reverse=True)], True
    except Exception as e:
        logger.warning(f"Failed to load languages from {languages_url}: {e}")
        return [], False


async def _fetch_repository(client: httpx.AsyncClient, url: str, headers: dict) -> tuple[ProjectSummary, bool]:
    """Returns (project, ok). `ok` is False when an upstream error forced a fallback."""
    owner, repo = parse_repository_slug(url)

    try:
        resp = await client.get(f"{settings.GITHUB_API_URL}/repos/{owner}/{repo}", headers=headers)
        if resp.status_code == 404:
            return fallback_project(url, repo, MISSING_DESCRIPTION), True
        resp.raise_for_status()
        data = GitHubRepoResponse.model_validate(resp.json())
    except Exception as e:
        logger.warning(f"Failed to load repository {owner}/{repo}: {e}")
        return fallback_project(url, repo), False

    languages: List[str] = []
    ok = True
    if data.languages_url:
        languages, ok = await _fetch_languages(client, data.languages_url, headers)
    if not languages and data.language:
        languages = [data.language]

    project = ProjectSummary(
        name=repo if data.name is None else data.name,
        description=EMPTY_DESCRIPTION if data.description is None else data.description,
        stars=data.stargazers_count or 0,
        topics=data.topics or [],
        languages=languages,
        url=url if data.html_url is None else data.html_url,
    )
    return project, ok


async def fetch_github_project(client: httpx.AsyncClient, url: str, headers: dict) -> ProjectSummary:
    """Fetch one repository's panel data. Upstream errors become a fallback project."""
    project, _ = await _fetch_repository(client, url, headers)
    return project


async def fetch_github_projects(repo_urls: List[str], token: Optional[str] = None) -> List[ProjectSummary]:
    """Fetch all repositories concurrently, most-starred first.

    Raises GitHubUnavailable (carrying the degraded list) when any repository
    fell back because of an upstream error, so callers can show it without caching it.
    """
    # Validate every URL before any request goes out
    for url in repo_urls:
        parse_repository_slug(url)

    headers = create_github_headers(token)
    async with httpx.AsyncClient(timeout=settings.GITHUB_TIMEOUT_SECONDS) as client:
        results = await asyncio.gather(
            *[_fetch_repository(client, url, headers) for url in repo_urls]
        )

    projects = sorted((p for p, _ in results), key=lambda p: p.stars, reverse=True)
    failed = sum(1 for _, ok in results if not ok)
    if failed:
        raise GitHubUnavailable(projects, failed)
    return projects


def projects_cache_key(repo_urls: List[str], token: Optional[str] = None) -> str:
    """Key is independent of URL order; the token is hashed, never stored in clear."""
    token = settings.GITHUB_TOKEN if token is None else token
    return build_cache_key(
        "github-projects",
        hash_cache_key(",".join(sorted(repo_urls))),
        hash_cache_key(token or "anonymous"),
    )


async def get_github_projects(
    cache: MemoryCache[List[ProjectSummary]],
    repo_urls: List[str],
    token: Optional[str] = None,
    ttl_minutes: Optional[float] = None,
) -> List[ProjectSummary]:
    """Cached `fetch_github_projects`. Fetch errors propagate and are not cached."""
    if not repo_urls:
        return []

    return await cache.get_or_set(
        projects_cache_key(repo_urls, token),
        lambda: fetch_github_projects(repo_urls, token),
        ttl_minutes,
    )
