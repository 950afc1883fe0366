from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

import httpx

from .audit import JsonAuditLogger
from .config import AppConfig
from .errors import GraphRequestError


class GraphClient:
    """Microsoft Graph client bound to one tenant and API version.

    Requests are authenticated by the supplied ``httpx.Auth`` provider. Failed
    requests are logged and raised as :class:`GraphRequestError`; nothing is
    retried.
    """

    def __init__(
        self,
        config: AppConfig,
        auth: httpx.Auth,
        audit_logger: JsonAuditLogger,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config
        self.audit = audit_logger
        self.session = httpx.Client(
            base_url=config.graph_api_root,
            auth=auth,
            timeout=config.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> "GraphClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = self.session.request(method, path, **kwargs)
        url = str(response.request.url)

        if response.status_code >= 400:
            error = self._parse_error(response)
            self.audit.error(
                "graph_request_failed",
                method=method,
                status=response.status_code,
                url=url,
                code=error.code,
                error_message=error.message,
                request_id=error.request_id,
            )
            raise error

        self.audit.info(
            "graph_request_succeeded",
            method=method,
            status=response.status_code,
            url=url,
        )
        return response

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, json: Any, **kwargs: Any) -> httpx.Response:
        return self.request("POST", path, json=json, **kwargs)

    def patch(self, path: str, json: Any, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", path, **kwargs)

    def iter_pages(self, path: str, params: Optional[Dict[str, Any]] = None) -> Iterator[List[Dict[str, Any]]]:
        """Yield the ``value`` array of each page, following ``@odata.nextLink``.

        The next link already carries the original query, so ``params`` are
        only sent with the first request.
        """
        data = self.get(path, params=params).json()
        yield data.get("value", [])
        page = 1
        next_link = data.get("@odata.nextLink")
        while next_link:
            page += 1
            self.audit.debug("graph_next_page", page=page)
            data = self.get(next_link).json()
            yield data.get("value", [])
            next_link = data.get("@odata.nextLink")

    @staticmethod
    def _parse_error(response: httpx.Response) -> GraphRequestError:
        code = message = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            code = body["error"].get("code")
            message = body["error"].get("message")
        elif response.text:
            message = response.text
        return GraphRequestError(
            status_code=response.status_code,
            url=str(response.request.url),
            code=code,
            message=message,
            request_id=response.headers.get("request-id"),
        )
