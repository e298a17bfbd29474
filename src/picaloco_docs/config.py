# src/picaloco_docs/config.py

"""
Process configuration for the documentation relay.

Values come from the environment. The two Supabase values are required: if
either is missing the process must not start serving traffic.
"""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

REQUIRED_ENV_VARS = ("SUPABASE_URL", "SUPABASE_ANON_KEY")

# env var -> ServiceConfig field
_OPTIONAL_ENV_VARS = {
    "SPEC_CACHE_TTL_SECONDS": "cache_ttl_seconds",
    "SPEC_FETCH_TIMEOUT_SECONDS": "fetch_timeout_seconds",
    "APP_ENV": "environment",
    "HOST": "host",
    "PORT": "port",
}

REDACTED = "***"


class ConfigMissingError(RuntimeError):
    """Required configuration is absent or invalid. Fatal at startup."""


class ServiceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    supabase_url: str
    supabase_anon_key: str
    cache_ttl_seconds: float = 300.0
    fetch_timeout_seconds: float = 30.0
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000

    @field_validator("supabase_url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("SUPABASE_URL must be an http(s) URL")
        return value

    @field_validator("supabase_anon_key")
    @classmethod
    def _non_empty_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("SUPABASE_ANON_KEY must not be empty")
        return value

    @field_validator("cache_ttl_seconds", "fetch_timeout_seconds")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @property
    def spec_url(self) -> str:
        return f"{self.supabase_url}/rest/v1/"

    @property
    def server_url(self) -> str:
        return f"{self.supabase_url}/rest/v1"

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.cache_ttl_seconds)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def redact(self, text: str) -> str:
        """Replace the anon key with a placeholder wherever it appears."""
        if not text:
            return text
        return text.replace(self.supabase_anon_key, REDACTED)


def load_config(environ: Mapping[str, str] | None = None) -> ServiceConfig:
    """
    Build a ServiceConfig from environment variables.

    Raises ConfigMissingError when a required variable is unset/blank or a
    value does not validate.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in REQUIRED_ENV_VARS if not env.get(name, "").strip()]
    if missing:
        raise ConfigMissingError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    values = {
        "supabase_url": env["SUPABASE_URL"],
        "supabase_anon_key": env["SUPABASE_ANON_KEY"],
    }
    for env_name, field in _OPTIONAL_ENV_VARS.items():
        raw = env.get(env_name)
        if raw is not None and raw.strip():
            values[field] = raw.strip()

    try:
        return ServiceConfig(**values)
    except ValidationError as e:
        # pydantic echoes input values; keep the key out of the message
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigMissingError(f"Invalid configuration: {problems}") from None
