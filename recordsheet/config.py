"""Application configuration and environment management."""

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import AggregateKind, SheetConfig, normalize_color


class Settings(BaseSettings):
    """Defaults loaded from environment variables.

    Attributes:
        header_color: Default header row fill (RGB hex).
        default_aggregates: Comma separated aggregate names, ``all`` or ``none``.
        strict_rule_columns: Fail on formatting rules naming unknown columns.
        max_column_width: Upper bound applied when autosizing columns.
        log_level: Logging level used by the command line interface.
    """

    header_color: str = Field(default="ADD8E6", alias="RECORDSHEET_HEADER_COLOR")
    default_aggregates: str = Field(default="sum", alias="RECORDSHEET_DEFAULT_AGGREGATES")
    strict_rule_columns: bool = Field(default=False, alias="RECORDSHEET_STRICT_RULE_COLUMNS")
    max_column_width: int = Field(default=60, ge=8, alias="RECORDSHEET_MAX_COLUMN_WIDTH")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="RECORDSHEET_LOG_LEVEL"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("header_color")
    @classmethod
    def _normalize_header_color(cls, value: str) -> str:
        return normalize_color(value)

    @field_validator("default_aggregates")
    @classmethod
    def _check_aggregates(cls, value: str) -> str:
        AggregateKind.parse(value)
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    def get_default_aggregates(self) -> AggregateKind:
        """Return the configured default aggregates as flags."""
        return AggregateKind.parse(self.default_aggregates)

    def to_sheet_config(self, **overrides: Any) -> SheetConfig:
        """Build a sheet configuration seeded with these defaults."""
        values = {
            "header_color": self.header_color,
            "aggregates": self.get_default_aggregates(),
            "strict_rule_columns": self.strict_rule_columns,
        }
        values.update(overrides)
        return SheetConfig(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()
