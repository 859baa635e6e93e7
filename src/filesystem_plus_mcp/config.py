"""Server configuration via environment variables."""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field, field_validator

from .cli import split_dirs
from .paths import CasePolicy
from .registry import Tier

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _split_env(value: str) -> list[str]:
    return split_dirs([value]) if value else []


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment.

    Directory lists come from the environment here; directories given on
    the command line are merged in by :meth:`directory_candidates`.
    """

    readwrite_dirs: list[str] = Field(default_factory=list)
    readonly_dirs: list[str] = Field(default_factory=list)
    case_policy: CasePolicy = Field(default=CasePolicy.AUTO)
    protected_paths: list[str] = Field(default_factory=list)
    resolve_timeout: float = Field(default=10.0)
    tree_max_depth: int = Field(default=10)
    search_max_depth: int = Field(default=20)
    log_level: str = Field(default="INFO")

    @field_validator("case_policy", mode="before")
    @classmethod
    def validate_case_policy(cls, value: object) -> object:
        if isinstance(value, str):
            policy = value.strip().lower()
            allowed = {p.value for p in CasePolicy}
            if policy not in allowed:
                raise ValueError(
                    f"Invalid case policy '{value}'. Allowed: {', '.join(sorted(allowed))}"
                )
            return policy
        return value

    @field_validator("resolve_timeout")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("resolve_timeout must be > 0")
        return value

    @field_validator("tree_max_depth", "search_max_depth")
    @classmethod
    def validate_depths(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Depth limits must be >= 1")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in VALID_LOG_LEVELS:
            allowed = ", ".join(sorted(VALID_LOG_LEVELS))
            raise ValueError(f"Invalid log level '{value}'. Allowed: {allowed}")
        return level

    def directory_candidates(
        self, cli_dirs: list[tuple[str, Tier]] | None = None,
    ) -> list[tuple[str, Tier]]:
        """Command-line directories first, then those from the environment."""
        candidates = list(cli_dirs or [])
        candidates += [(d, Tier.READ_WRITE) for d in self.readwrite_dirs]
        candidates += [(d, Tier.READ_ONLY) for d in self.readonly_dirs]
        return candidates

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        return cls(
            readwrite_dirs=_split_env(os.getenv("FS_PLUS_READWRITE_DIRS", "")),
            readonly_dirs=_split_env(os.getenv("FS_PLUS_READONLY_DIRS", "")),
            case_policy=os.getenv("FS_PLUS_CASE_POLICY", "auto"),
            protected_paths=_split_env(os.getenv("FS_PLUS_PROTECTED_PATHS", "")),
            resolve_timeout=float(os.getenv("FS_PLUS_RESOLVE_TIMEOUT", "10.0")),
            tree_max_depth=int(os.getenv("FS_PLUS_TREE_MAX_DEPTH", "10")),
            search_max_depth=int(os.getenv("FS_PLUS_SEARCH_MAX_DEPTH", "20")),
            log_level=os.getenv("FS_PLUS_LOG_LEVEL", "INFO"),
        )


# Singleton — initialised once on first access.
_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/filesystem-plus-mcp/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logging.getLogger(__name__).info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = ServerConfig.from_env()
    return _config
