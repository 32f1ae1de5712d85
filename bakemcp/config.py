"""Generator settings, overridable through BAKEMCP_* environment variables."""

from __future__ import annotations

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

_JS_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class GeneratorSettings(BaseSettings):
    """Values baked into the generated Node project."""

    project_name: str = Field(
        default="generated-mcp", description="package.json name and FastMCP server name"
    )
    project_version: str = Field(
        default="1.0.0", description="package.json version and FastMCP server version"
    )
    fastmcp_version: str = Field(default="^3.29.0", description="fastmcp version range")
    zod_version: str = Field(default="^3.23.0", description="zod version range")
    base_url_env: str = Field(
        default="BASE_URL",
        description="Environment variable the generated server reads to override the base URL",
    )
    max_schema_depth: int = Field(
        default=32, ge=1, description="Nesting depth past which schemas render as z.any()"
    )
    fetch_timeout: float = Field(
        default=15.0, gt=0, description="Timeout in seconds when loading a spec from a URL"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = {"env_prefix": "BAKEMCP_", "case_sensitive": False}

    @field_validator("base_url_env")
    @classmethod
    def validate_base_url_env(cls, v: str) -> str:
        if not _JS_IDENTIFIER.match(v):
            raise ValueError(f"base_url_env must be a JavaScript identifier, got {v!r}")
        return v
