import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

DEFAULT_RETENTION_DAYS = 7

# Deployment-level override for the retention window, read without the RFD_ prefix
RETENTION_DAYS_ENV = "FILE_RETENTION_DAYS"


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by RFD_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("RFD_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "Red Flag Detector"
    version: str = "0.1.0"
    description: str = "Conversation red-flag analysis backend"
    home_path: str = "/"


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter)."""

    url: str = "sqlite+aiosqlite:///~/.local/share/redflag/redflag.db"
    echo: bool = False
    auto_migrate: bool = True  # create_all for SQLite, alembic for PostgreSQL
    sqlite_busy_timeout: float = 30.0  # Seconds a file SQLite writer waits for the lock


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from RFD_LOG_FILE env var."""
        return os.environ.get("RFD_LOG_FILE")


# =============================================================================
# Authentication Configuration
# =============================================================================


class SessionConfig(BaseModel):
    """Signed session token configuration."""

    secret: str = ""  # Must be set in production
    algorithm: str = "HS256"
    expire_days: int = 30
    cookie_name: str = "rfd_session"
    cookie_secure: bool = True


class GuestConfig(BaseModel):
    """Guest identity provisioning."""

    enabled: bool = True
    endpoint: str = "/api/auth/guest"
    expire_days: int = 7


class AuthConfig(BaseModel):
    """Authentication configuration."""

    session: SessionConfig = SessionConfig()
    guest: GuestConfig = GuestConfig()
    login_path: str = "/login"


# =============================================================================
# Lifecycle Configuration
# =============================================================================


class UsageConfig(BaseModel):
    """Per-user daily usage accounting."""

    daily_analysis_limit: int = Field(default=10, ge=0)
    guest_daily_analysis_limit: int = Field(default=3, ge=0)
    timezone: str = "UTC"  # Canonical zone for calendar-day boundaries

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class RetentionConfig(BaseModel):
    """Uploaded file retention and sweep schedule."""

    days: int = Field(default=DEFAULT_RETENTION_DAYS, gt=0)
    sweep_cron: str = "*/15 * * * *"
    sweep_batch_size: int = Field(default=100, gt=0)
    sweep_enabled: bool = True


class BlobStoreConfig(BaseModel):
    """External blob store holding uploaded files."""

    backend: Literal["http", "local"] = "local"
    base_url: str = ""  # HTTP backend: DELETE {base_url}/{storage_id}
    api_key: str = ""
    local_path: str = "~/.local/share/redflag/files"
    timeout: float = 10.0


class Config(BaseSettings):
    # These are BaseModel, so env_nested_delimiter handles their env vars
    server: Server = Server()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    auth: AuthConfig = AuthConfig()
    usage: UsageConfig = UsageConfig()
    retention: RetentionConfig = RetentionConfig()
    blob_store: BlobStoreConfig = BlobStoreConfig()

    model_config = {
        "env_prefix": "RFD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows RFD_DATABASE__URL override
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def apply_retention_override(self) -> Self:
        """Apply FILE_RETENTION_DAYS on top of retention.days.

        The value must be a positive integer; anything else is a
        configuration error rather than a silent fallback to the default.
        """
        raw = os.environ.get(RETENTION_DAYS_ENV)
        if raw is None or not raw.strip():
            return self
        try:
            days = int(raw)
        except ValueError as e:
            raise ValueError(f"{RETENTION_DAYS_ENV} must be an integer, got {raw!r}") from e
        if days <= 0:
            raise ValueError(f"{RETENTION_DAYS_ENV} must be positive, got {days}")
        self.retention = self.retention.model_copy(update={"days": days})
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - RFD_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup, before other modules
    are imported to ensure all loggers pick up the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)  # Suppress job completion spam
    logging.getLogger("passlib").setLevel(logging.ERROR)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
