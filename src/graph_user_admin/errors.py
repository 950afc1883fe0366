"""Exceptions raised by the Graph user administration sample."""

from __future__ import annotations

from typing import Optional


class GraphUserAdminError(Exception):
    """Base exception for all errors raised by this package."""


class ConfigurationError(GraphUserAdminError):
    """Required configuration is missing or inconsistent."""


class TokenAcquisitionError(GraphUserAdminError):
    """The identity platform did not return an access token.

    Attributes:
        error: MSAL error code (e.g. ``invalid_client``)
        description: Human readable description returned by the token endpoint
    """

    def __init__(self, error: Optional[str], description: Optional[str] = None):
        self.error = error
        self.description = description
        detail = error or "unknown_error"
        if description:
            detail = f"{detail}: {description}"
        super().__init__(f"Token acquisition failed: {detail}")


class GraphRequestError(GraphUserAdminError):
    """HTTP error returned by Microsoft Graph.

    Attributes:
        status_code: HTTP status code
        code: Graph error code from the response body, if any
        message: Graph error message from the response body, if any
        url: Request URL that failed
        request_id: Value of the ``request-id`` response header
    """

    def __init__(
        self,
        status_code: int,
        url: str,
        code: Optional[str] = None,
        message: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        self.status_code = status_code
        self.url = url
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{status_code}] {url}: {code or 'error'}: {message or 'no message'}")
