"""Pydantic schemas for GitHub project panels and cache introspection."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ProjectSummary(BaseModel):
    name: str = Field(..., description="Repository name")
    description: str = Field(..., description="Short repository description")
    stars: int = Field(0, description="Stargazer count")
    topics: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list, description="Languages ordered by bytes, largest first")
    url: str = Field(..., description="Public repository URL")


class GitHubRepoResponse(BaseModel):
    """Subset of the GitHub `GET /repos/{owner}/{repo}` payload we read."""
    name: Optional[str] = None
    description: Optional[str] = None
    stargazers_count: Optional[int] = None
    topics: Optional[List[str]] = None
    language: Optional[str] = None
    languages_url: Optional[str] = None
    html_url: Optional[str] = None

    model_config = {"extra": "ignore"}


class CacheStats(BaseModel):
    size: int
    keys: List[str]
