from __future__ import annotations

from typing import Generator, Iterable, List, Optional

import httpx
import msal

from .audit import JsonAuditLogger
from .config import GRAPH_DEFAULT_SCOPE, AppConfig
from .errors import TokenAcquisitionError


class ClientCredentialAuthProvider(httpx.Auth):
    """Bearer token provider for Microsoft Graph using the client credentials flow.

    One MSAL confidential client application is built per provider. A token is
    requested from the identity platform for every outgoing request; any reuse
    of tokens is left to MSAL's own in-memory cache. Attach the provider to an
    ``httpx.Client`` via ``auth=`` to stamp the ``Authorization`` header on
    every request.
    """

    def __init__(
        self,
        client_id: str,
        tenant_id: str,
        client_secret: str,
        authority_host: str = "https://login.microsoftonline.com",
        scopes: Optional[Iterable[str]] = None,
        audit_logger: Optional[JsonAuditLogger] = None,
    ):
        # Graph only accepts the static ".default" scope for app-only tokens.
        self.scopes: List[str] = list(scopes or [GRAPH_DEFAULT_SCOPE])
        self.tenant_id = tenant_id
        self.audit = audit_logger or JsonAuditLogger()
        self._app = msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=client_secret,
            authority=f"{authority_host.rstrip('/')}/{tenant_id}",
        )

    @classmethod
    def from_config(
        cls, config: AppConfig, audit_logger: Optional[JsonAuditLogger] = None
    ) -> "ClientCredentialAuthProvider":
        return cls(
            client_id=config.auth.client_id,
            tenant_id=config.tenant_id,
            client_secret=config.auth.client_secret.resolve(),
            authority_host=config.auth.authority_host,
            scopes=config.scopes,
            audit_logger=audit_logger,
        )

    def get_access_token(self) -> str:
        self.audit.debug("requesting_app_token", scopes=self.scopes)
        result = self._app.acquire_token_for_client(scopes=self.scopes)
        token = self._extract_token(result)
        self.audit.info(
            "acquired_app_token",
            auth_type="client_secret",
            scopes=self.scopes,
            expires_in=result.get("expires_in"),
        )
        return token

    def authenticate_request(self, request: httpx.Request) -> None:
        request.headers["Authorization"] = f"Bearer {self.get_access_token()}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        self.authenticate_request(request)
        yield request

    def _extract_token(self, result: Optional[dict]) -> str:
        if result and "access_token" in result:
            return result["access_token"]
        result = result or {}
        self.audit.error(
            "token_acquisition_failed",
            error=result.get("error"),
            error_description=result.get("error_description"),
            msal_correlation_id=result.get("correlation_id"),
        )
        raise TokenAcquisitionError(result.get("error"), result.get("error_description"))
