import os

# Avant l'import de l'app: pas de Redis en tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import json
from datetime import datetime, timezone
from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from rasvia_backend.app import app as fastapi_app
from rasvia_backend.payments.dependencies import get_checkout_provider, get_order_store
from rasvia_backend.payments.errors import StoreWriteFailed
from rasvia_backend.payments.models import CheckoutSession
from rasvia_backend.payments.workflow import PaymentRedirectWorkflow

FIXED_NOW = datetime(2026, 10, 18, 12, 30, tzinfo=timezone.utc)

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeCheckoutProvider:
    """Stripe en mémoire: sessions indexées par id, appels enregistrés."""

    def __init__(self):
        self.sessions = {}
        self.error = None
        self.calls = []
        self.created = []

    def add(self, session: CheckoutSession) -> CheckoutSession:
        self.sessions[session.id] = session
        return session

    def retrieve_session(self, session_id):
        self.calls.append(session_id)
        if self.error:
            raise self.error
        return self.sessions[session_id]

    def create_session(self, **params):
        self.calls.append("create_session")
        if self.error:
            raise self.error
        self.created.append(params)
        return {"id": "cs_test_new", "url": "https://checkout.stripe.test/c/pay/cs_test_new"}


class FakeOrderStore:
    """Supabase en mémoire; `fail` liste les opérations qui lèvent StoreWriteFailed."""

    def __init__(self):
        self.fail = set()
        self.orders = []
        self.order_items = []
        self.party_updates = []
        self.group_orders = []
        self._next_id = 100

    def _maybe_fail(self, operation):
        if operation in self.fail:
            raise StoreWriteFailed(operation, "connection reset")

    def create_order(self, row):
        self._maybe_fail("create_order")
        self._next_id += 1
        created = dict(row, id=self._next_id)
        self.orders.append(created)
        return created

    def create_order_items(self, rows):
        self._maybe_fail("create_order_items")
        self.order_items.append(list(rows))
        return rows

    def update_party_session(self, party_session_id, status, submitted_at):
        self._maybe_fail("update_party_session")
        self.party_updates.append((party_session_id, status, submitted_at))
        return [{"id": party_session_id, "status": status}]

    def create_group_order_summary(self, row):
        self._maybe_fail("create_group_order_summary")
        self.group_orders.append(row)
        return row

    @property
    def write_count(self):
        return len(self.orders) + len(self.order_items) + len(self.party_updates) + len(self.group_orders)


@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def fake_provider():
    return FakeCheckoutProvider()

@pytest.fixture
def fake_store():
    return FakeOrderStore()

@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW

@pytest.fixture
def make_session():
    """
    Fabrique une CheckoutSession; cart_items peut être une liste (sérialisée
    en JSON) ou une chaîne brute.
    """
    def _make(session_id="cs_test_123", payment_status="paid", cart_items=None, **metadata):
        meta = {k: str(v) for k, v in metadata.items()}
        if cart_items is not None:
            meta["cart_items"] = cart_items if isinstance(cart_items, str) else json.dumps(cart_items)
        return CheckoutSession(id=session_id, payment_status=payment_status, metadata=meta)
    return _make

@pytest.fixture
def workflow(fake_provider, fake_store, fixed_now):
    return PaymentRedirectWorkflow(fake_provider, fake_store, now=fixed_now)

@pytest.fixture
def client_with_fakes(app, fake_provider, fake_store) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_checkout_provider] = lambda: fake_provider
    app.dependency_overrides[get_order_store] = lambda: fake_store
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_checkout_provider, None)
        app.dependency_overrides.pop(get_order_store, None)

# Aucun accès réseau Supabase pendant les tests
@pytest.fixture(scope="function", autouse=True)
def mock_supabase_clients(monkeypatch):
    monkeypatch.setattr("rasvia_backend.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("rasvia_backend.infra.supabase_client.get_service_supabase", lambda: MagicMock())
