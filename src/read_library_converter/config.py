"""Service configuration loaded from environment variables."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "READLIB_"


class ServiceConfig(BaseModel):
    """Validated configuration of the conversion service."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    workspace_url: str = "https://kbase.us/services/ws"
    shock_url: str = "https://kbase.us/services/shock-api"
    scratch_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    http_host: str = "0.0.0.0"
    http_port: int = Field(default=5000, gt=0, lt=65536)
    rpc_timeout: float = Field(default=30 * 60.0, gt=0.0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServiceConfig:
        """Build configuration from ``READLIB_*`` environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for field in cls.model_fields:
            raw = env.get(ENV_PREFIX + field.upper())
            if raw is not None and raw.strip():
                values[field] = raw.strip()
        return cls.model_validate(values)
