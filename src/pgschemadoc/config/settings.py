"""Extraction configuration loading and validation.

Settings come from a YAML file, from environment variables (a .env file is
honoured through python-dotenv), and finally from CLI flags which override
both.
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "PGSCHEMADOC_"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="WARNING")
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class ExtractConfig(BaseModel):
    """Everything needed to extract one namespace."""
    database_url: str = Field(..., description="Target database URL")
    namespace: str = Field("public", description="Schema namespace to document")
    exclude: list[str] = Field(default_factory=list, description="Table names to skip")
    query_timeout: Optional[float] = Field(None, gt=0, description="Per-query timeout (seconds)")
    markdown_template: Optional[str] = Field(None, description="Path to a Jinja2 Markdown template")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("database_url")
    @classmethod
    def validate_dsn(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith(("postgresql://", "postgres://")):
            raise ValueError("database_url must start with 'postgresql://' or 'postgres://'")
        return v

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        if not v:
            raise ValueError("namespace must not be empty")
        return v

    @classmethod
    def from_yaml(cls, path: str | Path, **overrides) -> ExtractConfig:
        """Load configuration from YAML file.

        Environment variables fill in what the file leaves out; overrides win
        over both. The merged values are validated once, so a file without
        database_url is fine when the URL comes from an override or the
        environment.

        Args:
            path: Path to YAML configuration file
            **overrides: Values that take precedence over file and environment

        Returns:
            Validated ExtractConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid or has no database URL
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r") as f:
            data = yaml.safe_load(f)

        if not data:
            raise ValueError(f"Empty configuration file: {config_path}")
        if not isinstance(data, dict):
            raise ValueError(f"Invalid configuration in {config_path}: expected a mapping")

        merged = _merge(_merge(_env_values(), data), overrides)
        try:
            return cls._validate_merged(merged)
        except ValueError as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    @classmethod
    def from_env(cls, **overrides) -> ExtractConfig:
        """Load configuration from environment variables.

        Reads PGSCHEMADOC_DATABASE_URL (or DATABASE_URL), PGSCHEMADOC_NAMESPACE,
        PGSCHEMADOC_EXCLUDE (comma separated), PGSCHEMADOC_QUERY_TIMEOUT,
        PGSCHEMADOC_MARKDOWN_TEMPLATE and PGSCHEMADOC_LOG_LEVEL.

        Args:
            **overrides: Values that take precedence over the environment

        Raises:
            ValueError: If no database URL is available or a value is invalid
        """
        return cls._validate_merged(_merge(_env_values(), overrides))

    @classmethod
    def _validate_merged(cls, data: dict) -> ExtractConfig:
        if not data.get("database_url"):
            raise ValueError(
                f"No database URL: pass --postgres or set {ENV_PREFIX}DATABASE_URL"
            )
        return cls.model_validate(data)

    def redacted_url(self) -> str:
        """Database URL with the password masked, for logging."""
        dsn = self.database_url
        if "@" not in dsn:
            return dsn
        before_at, after_at = dsn.rsplit("@", 1)
        scheme, _, user_pass = before_at.partition("//")
        if ":" in user_pass:
            user = user_pass.split(":")[0]
            return f"{scheme}//{user}:***@{after_at}"
        return dsn


def _env_values() -> dict:
    """Configuration values present in the environment (after loading .env)."""
    load_dotenv()

    data: dict = {}
    database_url = os.getenv(f"{ENV_PREFIX}DATABASE_URL") or os.getenv("DATABASE_URL")
    if database_url:
        data["database_url"] = database_url
    if os.getenv(f"{ENV_PREFIX}NAMESPACE"):
        data["namespace"] = os.getenv(f"{ENV_PREFIX}NAMESPACE")
    exclude = os.getenv(f"{ENV_PREFIX}EXCLUDE", "")
    if exclude:
        data["exclude"] = [name.strip() for name in exclude.split(",") if name.strip()]
    if os.getenv(f"{ENV_PREFIX}QUERY_TIMEOUT"):
        data["query_timeout"] = os.getenv(f"{ENV_PREFIX}QUERY_TIMEOUT")
    if os.getenv(f"{ENV_PREFIX}MARKDOWN_TEMPLATE"):
        data["markdown_template"] = os.getenv(f"{ENV_PREFIX}MARKDOWN_TEMPLATE")
    if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        data["logging"] = {"level": os.getenv(f"{ENV_PREFIX}LOG_LEVEL")}
    return data


def _merge(base: dict, updates: dict) -> dict:
    """Apply non-None updates over base; nested mappings are merged one level deep."""
    merged = dict(base)
    for key, value in updates.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged
