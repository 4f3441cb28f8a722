"""
Logging Configuration.

Supplied by the process bootstrap of each service; fishlog only reads it.
Every option can be set through a ``FISHLOG_`` prefixed environment variable
or a ``.env`` file. List options take JSON (``'["production", "staging"]'``).
"""

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging and error-reporting configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FISHLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Kept as a plain string: unknown names are tolerated and fall back to INFO.
    level: str = Field(default="INFO", description="Minimum level (ERROR, WARNING, INFO, DEBUG)")
    environment: str = Field(default="development", description="Release stage reported to Bugsnag")
    app_version: Optional[str] = Field(default=None, description="Application version reported to Bugsnag")
    raw_durations: bool = Field(
        default=False,
        description="Also emit nsq_message_process_duration in nanoseconds from with_duration",
    )

    # Bugsnag Integration
    bugsnag_api_key: Optional[SecretStr] = Field(default=None, description="Bugsnag project API key")
    bugsnag_notify_release_stages: list[str] = Field(
        default_factory=list,
        description="Release stages that notify Bugsnag (empty: all stages)",
    )
    bugsnag_project_packages: list[str] = Field(
        default_factory=list,
        description="Importable packages whose location marks in-project stack frames",
    )
    bugsnag_project_paths: list[str] = Field(
        default_factory=list,
        description="Filesystem paths of in-project code (first one wins over packages)",
    )
    bugsnag_package_root: Optional[str] = Field(
        default=None,
        description="Override for the library root (site-packages) used to trim stack frames",
    )

    @property
    def error_reporting_enabled(self) -> bool:
        return self.bugsnag_api_key is not None and bool(self.bugsnag_api_key.get_secret_value())
