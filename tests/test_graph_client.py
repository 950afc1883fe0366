import json
import logging

import httpx
import pytest

from graph_user_admin.audit import JsonAuditLogger
from graph_user_admin.errors import GraphRequestError
from graph_user_admin.graph_client import GraphClient


def test_relative_paths_resolve_against_versioned_root(graph, fake_graph):
    graph.get("/users")
    assert str(fake_graph.requests[-1].url) == "https://graph.microsoft.com/v1.0/users"


def test_requests_carry_bearer_token(graph, fake_graph):
    graph.get("/users")
    assert fake_graph.requests[-1].headers["Authorization"] == "Bearer token-1"


def test_error_response_raises_graph_request_error(graph, log_stream):
    with pytest.raises(GraphRequestError) as exc_info:
        graph.get("/users/does-not-exist")

    error = exc_info.value
    assert error.status_code == 404
    assert error.code == "Request_ResourceNotFound"
    assert "does-not-exist" in error.message
    assert error.request_id == "00000000-0000-0000-0000-000000000000"
    assert error.url.endswith("/v1.0/users/does-not-exist")

    event = json.loads(log_stream.getvalue().splitlines()[-1])
    assert event["message"] == "graph_request_failed"
    assert event["status"] == 404
    assert event["correlation_id"] == "corr-1"


def test_non_json_error_body_kept_as_message(config, auth_provider, audit_logger):
    transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway"))
    with GraphClient(config, auth=auth_provider, audit_logger=audit_logger, transport=transport) as client:
        with pytest.raises(GraphRequestError) as exc_info:
            client.get("/users")
    assert exc_info.value.status_code == 502
    assert exc_info.value.code is None
    assert exc_info.value.message == "Bad Gateway"


def test_throttled_request_is_not_retried(config, auth_provider, audit_logger):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429, headers={"Retry-After": "1"}, json={"error": {"code": "TooManyRequests"}})

    with GraphClient(config, auth=auth_provider, audit_logger=audit_logger, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(GraphRequestError):
            client.get("/users")
    assert len(calls) == 1


def test_iter_pages_follows_next_link(graph, fake_graph):
    fake_graph.page_size = 2
    for name in ["Carol", "Alice", "Eve", "Bob", "Dave"]:
        fake_graph.add_user(name)

    pages = list(graph.iter_pages("/users", params={"$select": "id,displayName", "$orderby": "displayName"}))

    assert [len(page) for page in pages] == [2, 2, 1]
    names = [user["displayName"] for page in pages for user in page]
    assert names == ["Alice", "Bob", "Carol", "Dave", "Eve"]
    # Follow-up requests use the absolute nextLink untouched.
    assert fake_graph.requests[1].url.params["$skiptoken"] == "2"
    assert fake_graph.requests[2].url.params["$skiptoken"] == "4"


def test_iter_pages_single_page(graph, fake_graph):
    fake_graph.add_user("Only")
    pages = list(graph.iter_pages("/users"))
    assert len(pages) == 1
    assert len(fake_graph.requests) == 1


def test_iter_pages_logs_each_followed_page(config, auth_provider, fake_graph, log_stream):
    audit = JsonAuditLogger(name="graph_user_admin.test.paging", level=logging.DEBUG, stream=log_stream)
    fake_graph.page_size = 1
    fake_graph.add_user("a")
    fake_graph.add_user("b")

    with GraphClient(config, auth=auth_provider, audit_logger=audit, transport=fake_graph.transport()) as client:
        list(client.iter_pages("/users"))

    pages = [
        json.loads(line)["page"]
        for line in log_stream.getvalue().splitlines()
        if json.loads(line)["message"] == "graph_next_page"
    ]
    assert pages == [2]
