"""Configuration management for httping."""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import DEFAULT_DELAY_MS, DEFAULT_TIMEOUT_MS, DEFAULT_USER_AGENT
from .errors import ConfigError


class HttpingConfig(BaseModel):
    """Settings for one run. Read-only once the run starts."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = Field(min_length=1, description="Target URL")
    count: int = Field(default=0, ge=0, description="Number of requests, 0 for unbounded")
    delay_ms: int = Field(
        default=DEFAULT_DELAY_MS, ge=0, description="Minimum delay between requests in ms"
    )
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0, description="Request timeout in ms")
    keep_alive: bool = False
    disable_compression: bool = False
    disable_http2: bool = False
    exclude_new_connections: bool = Field(
        default=False,
        description="Leave requests on new connections out of the statistics",
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)

    @field_validator("user_agent")
    @classmethod
    def validate_user_agent_ascii(cls, value: str) -> str:
        """Header values go on the wire as ASCII."""
        if not value.isascii():
            raise ValueError("must contain only ASCII characters")
        return value


def load_config(url: str, config_path: Path | None = None, **overrides: Any) -> HttpingConfig:
    """Build the run configuration.

    Values come from the optional TOML file first, then from overrides
    that are not None (command-line options), then the target URL.

    Args:
        url: Target URL
        config_path: Optional TOML file with defaults
        **overrides: Field values taking precedence over the file

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file cannot be read or a value is invalid
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e.strerror or e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    data.update({key: value for key, value in overrides.items() if value is not None})
    data["url"] = url

    try:
        return HttpingConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e
