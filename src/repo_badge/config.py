import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from repo_badge.domain.exceptions import ConfigException

# Environment variable -> ServiceSettings field
ENV_VARS = {
    "BADGE_HOST": "host",
    "PORT": "port",
    "GITHUB_API_URL": "api_url",
    "BADGE_USER_AGENT": "user_agent",
    "UPSTREAM_TIMEOUT": "upstream_timeout",
    "CACHE_TTL": "cache_ttl",
    "CACHE_SWEEP_INTERVAL": "cache_sweep_interval",
    "RATE_LIMIT_REQUESTS": "rate_limit_requests",
    "RATE_LIMIT_WINDOW": "rate_limit_window",
    "LOG_LEVEL": "log_level",
}


class ServiceSettings(BaseModel):
    """Runtime settings of the badge service, read once at startup."""
    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = Field(3000, gt=0, lt=65536)
    api_url: str = "https://api.github.com"
    user_agent: str = "Badge-Generator"
    upstream_timeout: float = Field(10.0, gt=0, description="Total seconds allowed per GitHub API call")
    cache_ttl: float = Field(300.0, gt=0, description="Seconds a rendered badge is served from cache")
    cache_sweep_interval: float = Field(60.0, gt=0)
    rate_limit_requests: int = Field(100, gt=0, description="Requests allowed per client per window")
    rate_limit_window: float = Field(60.0, gt=0, description="Rolling window length in seconds")
    log_level: str = Field("INFO", pattern=r"(?i)^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> ServiceSettings:
    """
    Builds ServiceSettings from environment variables, using defaults for unset ones.

    Raises:
        ConfigException: If a variable is set to a value of the wrong type or range.
    """
    environ = os.environ if environ is None else environ
    values = {field: environ[name] for name, field in ENV_VARS.items() if environ.get(name)}

    try:
        return ServiceSettings(**values)
    except ValidationError as e:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigException(f"Invalid configuration: {problems}") from e
