"""
Centralized configuration loader for ART Finder.

Loads settings from an optional YAML file and environment variables
(``.env`` is honoured via python-dotenv).  Environment variables override
YAML values.

Provides:
    - Settings: Application settings (credentials, limits, backend choice)
    - get_settings(): Cached process-wide accessor for library callers
    - reset_settings(): Clear the cached instance
    - validate_env(): Report which credentials are present for a backend

Components never read the environment themselves: build one ``Settings``
at startup and pass it (or values from it) into each constructor.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from artfinder.exceptions import ConfigurationError

# ---------------------------------------------------------------------------
# Project root directory (parent of artfinder/)
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "settings.yaml"

BACKENDS = ("supabase", "astra", "memory")

logger = logging.getLogger(__name__)


# ===========================================================================
# SETTINGS
# ===========================================================================


@dataclass
class Settings:
    """
    Application settings.

    Credentials default to empty strings; the components that need them
    raise ``ConfigurationError`` at construction when they are missing.
    """

    # Source credentials
    youtube_api_key: str = ""
    reddit_client_id: str = ""
    reddit_client_secret: str = ""
    reddit_user_agent: str = "artfinder/1.0"

    # Completion provider
    openai_api_key: str = ""
    openai_model: str = "gpt-4"
    openai_base_url: str = "https://api.openai.com/v1"
    analysis_max_items: Optional[int] = None
    analysis_timeout: float = 60.0

    # Persistence
    persistence_backend: str = "supabase"
    supabase_url: str = ""
    supabase_service_key: str = ""
    astra_base_url: str = ""
    astra_token: str = ""
    astra_keyspace: str = "artfinder"
    research_table: str = "research_data"
    analysis_table: str = "analysis_results"
    write_concurrency: int = 8

    # Source limits
    youtube_max_results: int = 10
    reddit_limit: int = 25

    # Networking
    http_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    def __post_init__(self) -> None:
        self.persistence_backend = (self.persistence_backend or "").strip().lower()
        if self.persistence_backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown persistence backend '{self.persistence_backend}'. "
                f"Valid backends: {list(BACKENDS)}"
            )
        if self.write_concurrency < 1:
            raise ConfigurationError(
                f"write_concurrency must be >= 1, got {self.write_concurrency}"
            )

    @classmethod
    def from_yaml(
        cls,
        path: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> "Settings":
        """
        Load settings from a YAML file, then apply environment overrides.

        If the file does not exist, defaults are used.  Unknown YAML keys
        are ignored with a warning.

        Args:
            path: Path to the YAML file. Defaults to
                ``<PROJECT_ROOT>/config/settings.yaml``.
            env: Mapping to read overrides from. Defaults to ``os.environ``
                after loading ``.env``.

        Returns:
            Populated Settings instance.

        Raises:
            ConfigurationError: If the YAML cannot be parsed, or a YAML value
                or env override cannot be cast to the field's type.
        """
        path = Path(path) if path else DEFAULT_CONFIG_PATH
        if env is None:
            load_dotenv()
            env = dict(os.environ)

        data: Dict[str, Any] = {}
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as fh:
                    data = yaml.safe_load(fh) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    f"Failed to parse settings YAML at {path}: {exc}"
                ) from exc
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Settings YAML at {path} must contain a mapping"
                )

        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown settings key '%s' in %s", key, path)
                continue
            cast_fn = FIELD_CASTS.get(key)
            if value is None or cast_fn is None:
                kwargs[key] = value
                continue
            try:
                kwargs[key] = cast_fn(value)
            except (ValueError, TypeError) as exc:
                raise ConfigurationError(
                    f"Invalid value for '{key}' in {path}: {value!r} ({exc})"
                ) from exc

        # -----------------------------------------------------------------
        # Environment variable overrides
        # -----------------------------------------------------------------
        for env_key, (attr_name, cast_fn) in ENV_OVERRIDES.items():
            env_val = env.get(env_key)
            if env_val is None or env_val == "":
                continue
            try:
                kwargs[attr_name] = cast_fn(env_val)
            except (ValueError, TypeError) as exc:
                raise ConfigurationError(
                    f"Invalid value for env var {env_key}='{env_val}': {exc}"
                ) from exc

        return cls(**kwargs)


ENV_OVERRIDES: Dict[str, tuple] = {
    "YOUTUBE_API_KEY": ("youtube_api_key", str),
    "REDDIT_CLIENT_ID": ("reddit_client_id", str),
    "REDDIT_CLIENT_SECRET": ("reddit_client_secret", str),
    "REDDIT_USER_AGENT": ("reddit_user_agent", str),
    "OPENAI_API_KEY": ("openai_api_key", str),
    "OPENAI_MODEL": ("openai_model", str),
    "OPENAI_BASE_URL": ("openai_base_url", str),
    "SUPABASE_URL": ("supabase_url", str),
    "SUPABASE_SERVICE_KEY": ("supabase_service_key", str),
    "ASTRA_BASE_URL": ("astra_base_url", str),
    "ASTRA_TOKEN": ("astra_token", str),
    "ASTRA_KEYSPACE": ("astra_keyspace", str),
    "ARTFINDER_BACKEND": ("persistence_backend", str),
    "ARTFINDER_LOG_LEVEL": ("log_level", str),
    "ARTFINDER_LOG_DIR": ("log_dir", str),
    "ARTFINDER_WRITE_CONCURRENCY": ("write_concurrency", int),
    "ARTFINDER_HTTP_TIMEOUT": ("http_timeout", float),
    "ARTFINDER_ANALYSIS_MAX_ITEMS": ("analysis_max_items", int),
}

# Casts applied to YAML values
FIELD_CASTS: Dict[str, Any] = {attr: cast for attr, cast in ENV_OVERRIDES.values()}
FIELD_CASTS.update(
    {
        "youtube_max_results": int,
        "reddit_limit": int,
        "analysis_timeout": float,
        "research_table": str,
        "analysis_table": str,
    }
)


# ===========================================================================
# SINGLETON SETTINGS ACCESSOR
# ===========================================================================

_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the cached process-wide Settings.

    On first call, loads from ``config/settings.yaml`` (or defaults) plus
    the environment.  Subsequent calls return the cached instance.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings.from_yaml()
    return _settings_instance


def reset_settings() -> None:
    """Reset the cached Settings instance."""
    global _settings_instance
    _settings_instance = None


# ===========================================================================
# ENVIRONMENT VARIABLE VALIDATION
# ===========================================================================

# Always needed: the analysis step runs on every request
REQUIRED_ENV_VARS: List[str] = ["OPENAI_API_KEY"]

BACKEND_ENV_VARS: Dict[str, List[str]] = {
    "supabase": ["SUPABASE_URL", "SUPABASE_SERVICE_KEY"],
    "astra": ["ASTRA_BASE_URL", "ASTRA_TOKEN"],
    "memory": [],
}

# Needed only when the matching source is selected
OPTIONAL_ENV_VARS: List[str] = [
    "YOUTUBE_API_KEY",
    "REDDIT_CLIENT_ID",
    "REDDIT_CLIENT_SECRET",
]


def validate_env(backend: str = "supabase", strict: bool = True) -> Dict[str, bool]:
    """
    Validate that the environment variables for *backend* are set.

    Args:
        backend: Persistence backend name.
        strict: If ``True``, raise ``ConfigurationError`` when any required
            variable is missing.

    Returns:
        Dict mapping variable name to presence status.

    Raises:
        ConfigurationError: If the backend is unknown, or ``strict=True``
            and required vars are missing.
    """
    if backend not in BACKEND_ENV_VARS:
        raise ConfigurationError(f"Unknown persistence backend '{backend}'")

    status: Dict[str, bool] = {}
    missing: List[str] = []

    for var in REQUIRED_ENV_VARS + BACKEND_ENV_VARS[backend]:
        present = bool(os.environ.get(var))
        status[var] = present
        if not present:
            missing.append(var)

    for var in OPTIONAL_ENV_VARS:
        status[var] = bool(os.environ.get(var))

    if strict and missing:
        raise ConfigurationError(
            f"Missing required environment variables: {missing}. "
            f"Copy .env.example to .env and fill in the values."
        )

    return status
