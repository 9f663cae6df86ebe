from __future__ import annotations

import os
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings


class EnvSettings(BaseSettings):
    """Runtime settings provided via environment variables."""

    tenant_id: Optional[str] = Field(default=None, alias="RUCKUS_TENANT_ID")
    client_id: Optional[str] = Field(default=None, alias="RUCKUS_CLIENT_ID")
    client_secret: Optional[SecretStr] = Field(default=None, alias="RUCKUS_CLIENT_SECRET")

    # Empty region means the global deployment (api.ruckus.cloud)
    region: str = Field(default="", alias="RUCKUS_REGION")

    config_file: Optional[str] = Field(default=None, alias="R1_CONFIG_FILE")

    # Optional internal API auth (recommended when the service is behind your MCP platform)
    internal_api_key: Optional[SecretStr] = Field(default=None, alias="R1_INTERNAL_API_KEY")

    # If true, reject requests that don't include authz context (subject + scopes)
    require_authz_context: bool = Field(default=False, alias="R1_REQUIRE_AUTHZ_CONTEXT")

    # Comma-separated CIDRs allowed to reach POST /mcp (empty = any)
    mcp_allowed_ips: Optional[str] = Field(default=None, alias="R1_MCP_ALLOWED_IPS")

    model_config = {
        "extra": "ignore",
        "case_sensitive": True,
    }

    def require_credentials(self) -> None:
        """Fail with every missing or blank credential variable listed."""
        secret = self.client_secret.get_secret_value() if self.client_secret else None
        checks = [
            ("RUCKUS_TENANT_ID", self.tenant_id),
            ("RUCKUS_CLIENT_ID", self.client_id),
            ("RUCKUS_CLIENT_SECRET", secret),
        ]
        errors = []
        for variable, value in checks:
            if value is None:
                errors.append(f"{variable}: Required environment variable is missing")
            elif not value.strip():
                errors.append(f"{variable}: Environment variable cannot be empty")
        if errors:
            raise RuntimeError("Environment validation failed:\n" + "\n".join(errors))


class PollingConfig(BaseModel):
    # Defaults for tools that track asynchronous backend activities
    max_retries: int = Field(default=5, ge=1)
    poll_interval_ms: int = Field(default=2000, ge=0)


class HttpConfig(BaseModel):
    timeout_s: float = 30.0


class QueryConfig(BaseModel):
    """Defaults applied to list/query payloads."""

    page_size: int = Field(default=10000, ge=1)
    sort_order: Literal["ASC", "DESC"] = "ASC"
    venue_search_fields: List[str] = Field(
        default_factory=lambda: ["name", "addressLine", "description", "tagList"]
    )


class AuthzConfig(BaseModel):
    # Tool -> required scopes (any-of). Tools not listed need no scope.
    tool_scopes: Dict[str, List[str]] = Field(default_factory=dict)

    # If true, deny calls when context has no scopes (fail closed).
    require_scopes: bool = False


class AppConfig(BaseModel):
    polling: PollingConfig = Field(default_factory=PollingConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    authz: AuthzConfig = Field(default_factory=AuthzConfig)


def load_config(path: Optional[str]) -> AppConfig:
    import yaml

    if not path:
        return AppConfig()
    if not os.path.exists(path):
        raise RuntimeError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        raise RuntimeError(f"Invalid config file {path}: {e}") from e
