"""Client configuration loading and validation."""

from __future__ import annotations

import math
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, ClassVar, Dict, Literal

import yaml
from pydantic import Field, PositiveInt, StrictStr
from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from cloudvars.errors import ConfigError

DEFAULT_CLOUD_HOSTS: tuple[str, ...] = (
    "wss://clouddata.turbowarp.org",
    "wss://clouddata.turbowarp.xyz",
)

DEFAULT_CONFIG_LOCATIONS: tuple[Path, ...] = (
    Path("./config/cloudvars.yaml"),
    Path("./config/cloudvars.yml"),
)


class CloudSettings(BaseSettings):
    """Validated, immutable settings for one cloud variable session."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="CLOUDVARS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Connection + identity
    cloud_hosts: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CLOUD_HOSTS),
        description="Candidate cloud servers, tried round-robin on reconnect.",
    )
    project_id: str = Field(
        description="Project whose variables are synchronised. Numbers are sent as strings.",
    )
    user_agent: StrictStr | None = Field(
        default=None,
        description="Contact information sent in the User-Agent header (native platform only).",
    )
    username: StrictStr | None = Field(
        default=None,
        description="Session username. A random playerNNNN name is generated when omitted.",
    )
    platform: Literal["native", "browser"] = Field(
        default="native",
        description="Native transports must send a User-Agent; browser transports cannot.",
    )

    # Reconnect backoff
    reconnect_base_delay_ms: PositiveInt = Field(
        default=2000,
        description="Base unit (milliseconds) of the randomised reconnect delay.",
    )
    reconnect_max_multiplier: PositiveInt = Field(
        default=5,
        description="Cap on the attempt multiplier applied to the base delay.",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level used by the bundled scripts.",
    )

    config_path: Path | None = Field(
        default=None,
        description="Resolved path to the on-disk config that seeded the settings.",
        exclude=True,
    )

    @field_validator("cloud_hosts", mode="before")
    @classmethod
    def _split_cloud_hosts(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [host.strip() for host in value.split(",") if host.strip()]
        if isinstance(value, tuple):
            return list(value)
        return value

    @field_validator("cloud_hosts")
    @classmethod
    def _require_cloud_host(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("At least one cloud host is required")
        return value

    @field_validator("project_id", mode="before")
    @classmethod
    def _normalize_project_id(cls, value: Any) -> str:
        # bool is an int subclass but never a valid project id
        if isinstance(value, bool):
            raise ValueError(f"Project ID should be a string or number: {value!r}")
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"Project ID should be a finite number: {value!r}")
            return str(int(value)) if value.is_integer() else repr(value)
        if not isinstance(value, str):
            raise ValueError(f"Project ID should be a string or number: {value!r}")
        if not value:
            raise ValueError("Project ID must not be empty")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        if isinstance(value, str):
            return value.upper()
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[CloudSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # A config file sits between explicit kwargs and the environment.
        return (init_settings, _config_file_source, env_settings, dotenv_settings, file_secret_settings)


def _config_file_source() -> Dict[str, Any]:
    """Read the first YAML config file found, or nothing."""

    explicit = os.getenv("CLOUDVARS_CONFIG_FILE")
    candidates = ([Path(explicit).expanduser()] if explicit else []) + list(DEFAULT_CONFIG_LOCATIONS)
    path = next((candidate for candidate in candidates if candidate.is_file()), None)
    if path is None:
        return {}
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Failed to read cloudvars config file {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid cloudvars config file {path}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Cloudvars config file {path} must contain a mapping at top level.")
    return {"config_path": path, **raw}


def load_settings(**values: Any) -> CloudSettings:
    """Build settings from keyword overrides, converting validation failures to ``ConfigError``."""

    try:
        return CloudSettings(**values)
    except PydanticValidationError as exc:
        raise ConfigError(str(exc)) from exc


@lru_cache()
def get_settings() -> CloudSettings:
    """Return memoized settings resolved from file and environment."""

    return load_settings()
