"""
Configuration management for the KGIC site backend and podcast player
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

DEFAULT_API_BASE_URL = "http://localhost:8000"
DEFAULT_ALLOWED_ORIGINS = ["http://localhost:3000"]


@dataclass
class SupabaseConfig:
    """Configuration for the hosted backend (database, storage, identity)."""

    url: str = ""
    anon_key: str = ""
    service_role: str = ""
    podcasts_bucket: str = "podcasts"
    signed_url_ttl_seconds: int = 60 * 60 * 12

    @property
    def is_configured(self) -> bool:
        """True when public (anon) access to the backend is possible."""
        return bool(self.url and self.anon_key)

    @property
    def has_service_role(self) -> bool:
        """True when privileged server-side operations (uploads, signing) are possible."""
        return bool(self.url and self.service_role)

    def validate(self) -> None:
        """Validate backend configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.url and not self.url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid supabase url: {self.url!r}")
        if self.signed_url_ttl_seconds <= 0:
            raise ValueError("signed_url_ttl_seconds must be positive")


@dataclass
class SiteConfig:
    """Configuration for the public site API."""

    api_base_url: str = DEFAULT_API_BASE_URL
    allowed_origins: List[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS)
    )
    request_timeout_seconds: float = 20.0


@dataclass
class PlayerConfig:
    """Configuration for the podcast player."""

    volume: int = 70
    mpv_socket_path: Optional[str] = None
    grace_window_seconds: int = 60

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0 <= self.volume <= 100:
            raise ValueError(f"Player volume must be 0-100, got {self.volume}")
        if self.grace_window_seconds < 0:
            raise ValueError("grace_window_seconds cannot be negative")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # default: ~/.local/share/kgic/kgic.log
    console_output: bool = False


@dataclass
class Config:
    """Main configuration object."""

    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "kgic"
    return Path.home() / ".config" / "kgic"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "kgic"
    return Path.home() / ".local" / "share" / "kgic"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/kgic (or ~/.config/kgic)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def apply_env_overrides(config: Config) -> Config:
    """Override configuration values with environment variables.

    - SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_ROLE
    - KGIC_API_BASE_URL
    - ALLOWED_ORIGINS (comma separated)
    """
    supabase_url = os.environ.get("SUPABASE_URL")
    anon_key = os.environ.get("SUPABASE_ANON_KEY")
    service_role = os.environ.get("SUPABASE_SERVICE_ROLE")
    api_base_url = os.environ.get("KGIC_API_BASE_URL")
    allowed_origins = os.environ.get("ALLOWED_ORIGINS")

    if supabase_url:
        config.supabase.url = supabase_url.rstrip("/")
    if anon_key:
        config.supabase.anon_key = anon_key
    if service_role:
        config.supabase.service_role = service_role
    if api_base_url:
        config.site.api_base_url = api_base_url.rstrip("/")
    if allowed_origins:
        config.site.allowed_origins = _split_origins(allowed_origins)

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, falling back to defaults.

    Environment variables (and a .env file in the config directory) override
    TOML values. Invalid sections are replaced by their defaults.
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()
    config = Config()

    if not config_path.exists():
        logger.debug(f"No configuration at {config_path}, using defaults")
        return apply_env_overrides(config)

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error loading configuration from {config_path}: {e}")
        return apply_env_overrides(config)

    if "supabase" in toml_data:
        supabase_data = toml_data["supabase"]
        config.supabase = SupabaseConfig(
            url=str(supabase_data.get("url", config.supabase.url)).rstrip("/"),
            anon_key=supabase_data.get("anon_key", config.supabase.anon_key),
            service_role=supabase_data.get(
                "service_role", config.supabase.service_role
            ),
            podcasts_bucket=supabase_data.get(
                "podcasts_bucket", config.supabase.podcasts_bucket
            ),
            signed_url_ttl_seconds=int(
                supabase_data.get(
                    "signed_url_ttl_seconds", config.supabase.signed_url_ttl_seconds
                )
            ),
        )
        try:
            config.supabase.validate()
        except ValueError as e:
            logger.warning(f"Invalid supabase configuration: {e}; using defaults")
            config.supabase = SupabaseConfig()

    if "site" in toml_data:
        site_data = toml_data["site"]
        origins = site_data.get("allowed_origins", config.site.allowed_origins)
        if isinstance(origins, str):
            origins = _split_origins(origins)
        config.site = SiteConfig(
            api_base_url=str(
                site_data.get("api_base_url", config.site.api_base_url)
            ).rstrip("/"),
            allowed_origins=list(origins),
            request_timeout_seconds=float(
                site_data.get(
                    "request_timeout_seconds", config.site.request_timeout_seconds
                )
            ),
        )

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            volume=int(player_data.get("volume", config.player.volume)),
            mpv_socket_path=player_data.get("mpv_socket_path"),
            grace_window_seconds=int(
                player_data.get(
                    "grace_window_seconds", config.player.grace_window_seconds
                )
            ),
        )
        try:
            config.player.validate()
        except ValueError as e:
            logger.warning(f"Invalid player configuration: {e}; using defaults")
            config.player = PlayerConfig()

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return apply_env_overrides(config)
