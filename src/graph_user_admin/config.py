from __future__ import annotations

import os
from pathlib import Path
from typing import List, Literal, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ConfigurationError

GRAPH_DEFAULT_SCOPE = "https://graph.microsoft.com/.default"


class SecretRef(BaseModel):
    """Reference to a secret source without storing the secret in code.

    Client secrets should be injected through environment variables. Inline
    values are accepted for local experiments only. Key Vault URIs are
    recognised so that configuration files can document where the secret lives,
    but they are not resolved here.
    """

    env: Optional[str] = Field(
        default=None, description="Environment variable name containing the secret"
    )
    value: Optional[str] = Field(
        default=None,
        description="Inline value (use only for local development; avoid in production)",
    )
    key_vault_secret_uri: Optional[str] = Field(
        default=None,
        description="URI of the Key Vault secret holding the client secret.",
    )

    model_config = ConfigDict(extra="forbid")

    def resolve(self) -> str:
        if self.env:
            env_value = os.getenv(self.env)
            if env_value:
                return env_value
            raise ValueError(f"Environment variable {self.env} is not set")
        if self.value:
            return self.value
        if self.key_vault_secret_uri:
            raise ValueError(
                "Key Vault secret resolution is not supported. "
                "Export the secret into an environment variable and reference it with `env`."
            )
        raise ValueError("No secret reference provided for resolution")


class ClientSecretAuth(BaseModel):
    type: Literal["client_secret"] = "client_secret"
    client_id: str
    client_secret: SecretRef
    authority_host: str = Field(
        default="https://login.microsoftonline.com",
        description="AAD authority host",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("authority_host")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class AppConfig(BaseModel):
    tenant_id: str = Field(description="Tenant ID or domain; also the issuer of local identities")
    auth: ClientSecretAuth
    scopes: List[str] = Field(default_factory=lambda: [GRAPH_DEFAULT_SCOPE])
    graph_base_url: str = Field(
        default="https://graph.microsoft.com",
        description="Graph endpoint. Override for national clouds if needed.",
    )
    api_version: str = "v1.0"
    timeout: float = 30.0
    page_size: Optional[int] = Field(default=None, ge=1, le=999)
    extensions_app_client_id: Optional[str] = Field(
        default=None,
        description="Client ID of the b2c-extensions-app that owns custom attributes",
    )
    custom_attributes: List[str] = Field(
        default_factory=lambda: ["customString", "customInt", "customBoolean"]
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("scopes")
    @classmethod
    def ensure_scopes(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("At least one scope must be provided")
        return value

    @field_validator("graph_base_url")
    @classmethod
    def strip_base_url(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def graph_api_root(self) -> str:
        return f"{self.graph_base_url}/{self.api_version}"

    @property
    def extension_prefix(self) -> str:
        """Prefix of schema extension attribute names, ``extension_{appid}_``."""
        if not self.extensions_app_client_id:
            return ""
        return f"extension_{self.extensions_app_client_id.replace('-', '')}_"

    @property
    def extension_attribute_names(self) -> List[str]:
        prefix = self.extension_prefix
        if not prefix:
            return []
        return [prefix + name for name in self.custom_attributes]

    @classmethod
    def load(cls, path: Union[str, Path]) -> "AppConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}

        return cls(**raw)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Build the configuration from ``AZURE_*`` environment variables.

        The client secret is kept as a reference to ``AZURE_CLIENT_SECRET`` and
        resolved when the auth provider is built from this configuration.
        """
        environ = os.environ if environ is None else environ
        missing = [
            name
            for name in ("AZURE_TENANT_ID", "AZURE_CLIENT_ID", "AZURE_CLIENT_SECRET")
            if not environ.get(name)
        ]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

        raw = {
            "tenant_id": environ["AZURE_TENANT_ID"],
            "auth": {
                "client_id": environ["AZURE_CLIENT_ID"],
                "client_secret": {"env": "AZURE_CLIENT_SECRET"},
            },
        }
        if environ.get("B2C_EXTENSIONS_APP_CLIENT_ID"):
            raw["extensions_app_client_id"] = environ["B2C_EXTENSIONS_APP_CLIENT_ID"]
        if environ.get("GRAPH_BASE_URL"):
            raw["graph_base_url"] = environ["GRAPH_BASE_URL"]
        if environ.get("AZURE_AUTHORITY_HOST"):
            raw["auth"]["authority_host"] = environ["AZURE_AUTHORITY_HOST"]
        return cls(**raw)
