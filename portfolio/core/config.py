"""Application configuration via environment variables (pydantic-settings)."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # GitHub
    GITHUB_TOKEN: str = ""
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_USER_AGENT: str = "portfolio-api"
    GITHUB_API_VERSION: str = "2022-11-28"
    GITHUB_TIMEOUT_SECONDS: float = 10.0
    FEATURED_REPOS: str = ""  # Comma-separated: "https://github.com/a/b,https://github.com/c/d"

    # Cache
    CACHE_TTL_MINUTES: float = 30
    CACHE_CLEANUP_INTERVAL_SECONDS: int = 300  # 0 disables the background sweep

    # Defaults
    PROJECT_NAME: str = "Portfolio API"
    LOG_LEVEL: str = "INFO"

    @property
    def featured_repo_urls(self) -> list[str]:
        return [u.strip() for u in self.FEATURED_REPOS.split(",") if u.strip()]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

@lru_cache
def get_settings():
    return Settings()

settings = get_settings()
