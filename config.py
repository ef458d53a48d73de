"""
Configuration module for LocalSearch.

Handles:
- Environment variable loading (.env files)
- Typed service settings (pydantic-settings)
- Repository root parsing
"""

import os
import sys
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console

from utils.io.errors import ConfigurationError

console = Console(stderr=True)

DEFAULT_CORS_ORIGINS = "http://localhost:5678,http://localhost:3978"

# =============================================================================
# Repository Roots
# =============================================================================


def parse_repo_roots(raw: str) -> List[str]:
    """
    Parse a path list into absolute, de-duplicated repository roots.

    Semicolons are honored on every platform so Windows-style lists work
    anywhere; otherwise the platform path separator is used.
    """
    separator = ";" if ";" in raw else os.pathsep
    roots: List[str] = []
    for part in raw.split(separator):
        part = part.strip()
        if not part:
            continue
        root = os.path.abspath(os.path.expanduser(part))
        if root not in roots:
            roots.append(root)
    return roots


# =============================================================================
# Settings
# =============================================================================


class Settings(BaseSettings):
    """Service settings read from the environment (LOCALSEARCH_* plus REPO_ROOTS)."""

    model_config = SettingsConfigDict(env_prefix="LOCALSEARCH_", extra="ignore")

    repo_roots: str = Field(
        default="", validation_alias=AliasChoices("REPO_ROOTS", "LOCALSEARCH_REPO_ROOTS")
    )
    host: str = "0.0.0.0"
    port: int = 3001
    api_url: str = "http://localhost:3001"
    rg_path: str | None = None
    search_timeout_ms: int = 5000
    cors_origins: str = DEFAULT_CORS_ORIGINS
    mcp_profile: str = "localsearch"
    api_timeout: float = 30.0

    @property
    def allowed_roots(self) -> List[str]:
        return parse_repo_roots(self.repo_roots)

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def require_roots(self) -> List[str]:
        """Return the allowed roots, failing when none are configured."""
        roots = self.allowed_roots
        if not roots:
            raise ConfigurationError("REPO_ROOTS environment variable is not set or empty")
        return roots


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()


# =============================================================================
# Environment Loading
# =============================================================================


def load_configuration(env_file: str | None = None) -> None:
    """Load environment variables from multiple sources in priority order."""
    sources = []

    # 1. Explicitly provided file
    if env_file and os.path.exists(env_file):
        sources.append(env_file)
    elif env_file:
        console.print(f"[bold red]Error:[/bold red] Env file '{env_file}' not found.")
        sys.exit(1)

    # 2. LOCALSEARCH_ENV pointer
    env_var_path = os.getenv("LOCALSEARCH_ENV")
    if env_var_path and os.path.exists(env_var_path):
        sources.append(env_var_path)

    # 3. CWD .env
    cwd_env = Path(os.getcwd()) / ".env"
    if cwd_env.exists():
        sources.append(str(cwd_env))

    # 4. Global config
    tool_env = Path.home() / ".config" / "localsearch" / ".env"
    if tool_env.exists():
        sources.append(str(tool_env))

    if not sources:
        return

    load_dotenv(dotenv_path=sources[0], override=True)

    for path in sources[1:]:
        load_dotenv(dotenv_path=path, override=False)
