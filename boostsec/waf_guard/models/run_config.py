"""Configuration of a wafguard invocation."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["debug", "info", "warning", "error"]
OutputFormat = Literal["text", "json"]

_LOG_LEVEL_ALIASES = {"warn": "warning"}


class RunConfig(BaseModel):
    """Settings shared by the runner, the reporter and logging setup."""

    concurrency: int = Field(
        default=1, description="Maximum in-flight requests, 1 or less is sequential"
    )
    output_format: OutputFormat = Field(
        default="text", description="Report format (text or json)"
    )
    output_file: Path | None = Field(
        default=None, description="File the suite report is saved to"
    )
    log_level: LogLevel = Field(default="info", description="Minimum log level")
    log_format: OutputFormat = Field(default="text", description="Log line format")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        level = str(value or "").strip().lower()
        level = _LOG_LEVEL_ALIASES.get(level, level)
        if level not in {"debug", "info", "warning", "error"}:
            return "info"
        return level

    @field_validator("log_format", mode="before")
    @classmethod
    def _normalize_log_format(cls, value: object) -> str:
        log_format = str(value or "").strip().lower()
        if log_format == "text":
            return "text"
        return "json"
