import io
import uuid

import msal
import pytest

from graph_user_admin.audit import JsonAuditLogger
from graph_user_admin.auth import ClientCredentialAuthProvider
from graph_user_admin.config import AppConfig
from graph_user_admin.graph_client import GraphClient
from graph_user_admin.operations import UserOperations
from tests.fake_graph import FakeGraph

TENANT = "mytenant.onmicrosoft.com"
EXTENSIONS_APP_ID = "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"
EXTENSION_PREFIX = "extension_aaaaaaaabbbbccccddddeeeeeeeeeeee_"


class FakeConfidentialClientApplication:
    """Records constructor arguments and hands out numbered tokens."""

    instances = []

    def __init__(self, client_id, client_credential=None, authority=None, **kwargs):
        self.client_id = client_id
        self.client_credential = client_credential
        self.authority = authority
        self.calls = []
        self.result = None
        FakeConfidentialClientApplication.instances.append(self)

    def acquire_token_for_client(self, scopes, **kwargs):
        self.calls.append(list(scopes))
        if self.result is not None:
            return self.result
        return {
            "access_token": f"token-{len(self.calls)}",
            "token_type": "Bearer",
            "expires_in": 3599,
        }


@pytest.fixture(autouse=True)
def fake_msal(monkeypatch):
    FakeConfidentialClientApplication.instances = []
    monkeypatch.setattr(msal, "ConfidentialClientApplication", FakeConfidentialClientApplication)
    return FakeConfidentialClientApplication


@pytest.fixture
def config():
    return AppConfig(
        tenant_id=TENANT,
        auth={"client_id": "client-123", "client_secret": {"value": "s3cret"}},
        extensions_app_client_id=EXTENSIONS_APP_ID,
    )


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def audit_logger(log_stream):
    return JsonAuditLogger(
        name=f"graph_user_admin.test.{uuid.uuid4().hex}",
        tenant_id=TENANT,
        correlation_id="corr-1",
        stream=log_stream,
    )


@pytest.fixture
def fake_graph():
    return FakeGraph()


@pytest.fixture
def auth_provider(config, audit_logger):
    return ClientCredentialAuthProvider.from_config(config, audit_logger)


@pytest.fixture
def graph(config, auth_provider, audit_logger, fake_graph):
    client = GraphClient(config, auth=auth_provider, audit_logger=audit_logger, transport=fake_graph.transport())
    yield client
    client.close()


@pytest.fixture
def ops(graph, audit_logger):
    return UserOperations(graph, audit_logger)
