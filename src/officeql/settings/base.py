from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OfficeQLBaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="OFFICEQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    app_env: str = Field(
        default="dev",
        description="Application deployment environment (e.g., dev, qa, prod, local)"
    )

    log_level: str = Field(
        default="INFO",
        description="Base log level passed to setup_logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    dialect: str = Field(
        default="mysql",
        description="sqlglot dialect used when tokenizing generated statement text"
    )

    include_debug: bool = Field(
        default=False,
        description=(
            "Attach the debug envelope (entity type, method, translation joins, "
            "resolved language) to every built query. Useful for integration tests."
        )
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(
                f"Invalid log level '{v}'. Use DEBUG, INFO, WARNING, ERROR or CRITICAL."
            )
        return level

    def model_post_init(self, __context: Any) -> None:
        """Post initialization hook for additional setup.

        Subclasses should override this method and call super() to add
        custom initialization logic.
        """
        super().model_post_init(__context)
