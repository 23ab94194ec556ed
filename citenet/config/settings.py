from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
        env_prefix="CITENET_"
    )


    # ------------------------------------------------------------------
    # Core paths / remote services
    # ------------------------------------------------------------------
    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Base data directory for the persisted library and exports.",
    )

    SEMANTIC_SCHOLAR_URL: str = Field(
        default="https://api.semanticscholar.org/graph/v1",
        description="Base URL of the Semantic Scholar Graph API (citation index).",
    )

    SEMANTIC_SCHOLAR_API_KEY: Optional[SecretStr] = Field(
        default=None,
        description="Optional Semantic Scholar API key, sent as x-api-key.",
    )

    ARXIV_API_URL: str = Field(
        default="https://export.arxiv.org/api/query",
        description="arXiv Atom API endpoint (canonical metadata source).",
    )

    REQUEST_TIMEOUT: float = Field(
        default=8.0,
        gt=0,
        description="Timeout in seconds applied to every outbound HTTP call.",
    )

    ARXIV_DEFAULT_CATEGORIES: List[str] = Field(
        default_factory=lambda: ["cs.AI", "cs.LG", "cs.CL", "cs.CV", "cs.NE", "stat.ML"],
        description="Categories used when browsing the latest arXiv submissions.",
    )

    # ------------------------------------------------------------------
    # Citation network
    # ------------------------------------------------------------------
    NETWORK_MAX_DEPTH: int = Field(
        default=2,
        ge=0,
        description="Upper bound for the requested expansion depth.",
    )

    NETWORK_NEIGHBOR_LIMIT: int = Field(
        default=10,
        ge=0,
        description="Citing / cited papers fetched per expanded seed.",
    )

    LIBRARY_SEED_LIMIT: int = Field(
        default=10,
        ge=0,
        description="How many library entries to use as seeds when none are given.",
    )

    DEDUPE_LINKS: bool = Field(
        default=False,
        description=(
            "Collapse parallel links discovered through independent seeds. "
            "Off by default; the force-directed view copes with parallel links."
        ),
    )

    # ------------------------------------------------------------------
    # Library / API
    # ------------------------------------------------------------------
    LIBRARY_DEFAULT_NAME: str = Field(
        default="library",
        description="Default library name for data/library/{name}.pkl",
    )

    API_KEY: Optional[SecretStr] = Field(
        default=None,
        description="API key for header-based auth. If None, auth is disabled.",
    )

    RATE_LIMIT_PER_MINUTE: int = Field(
        default=60,
        ge=1,
        description="Requests per client host per minute before answering 429.",
    )

    # ------------------------------------------------------------------
    # Convenience derived paths
    # ------------------------------------------------------------------
    @property
    def library_dir(self) -> Path:
        return self.DATA_DIR / "library"

    @property
    def export_dir(self) -> Path:
        return self.DATA_DIR / "exports"

    @property
    def semantic_scholar_api_key(self) -> Optional[str]:
        if self.SEMANTIC_SCHOLAR_API_KEY is None:
            return None
        return self.SEMANTIC_SCHOLAR_API_KEY.get_secret_value() or None


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Singleton-style accessor so we only construct Settings once and
    ensure directories exist on first access.
    """
    global _settings
    if _settings is None:
        _settings = Settings()

        _settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
        _settings.library_dir.mkdir(parents=True, exist_ok=True)
        _settings.export_dir.mkdir(parents=True, exist_ok=True)

    return _settings


settings = get_settings()
