import os

# Pas de Redis pendant les tests: le rate limiting est désactivé au démarrage
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Any, Dict, Generator, List, Optional
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from storefront import config
from storefront.app import app as fastapi_app
from storefront.utils.security import require_user, require_admin

WEBHOOK_SECRET = "whsec_test_secret"


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def authenticated_admin_client(app, client):
    def _override_require_admin():
        return {"id": "admin-user-id", "role": "admin", "email": "admin@example.com", "token": "admin-token"}
    app.dependency_overrides[require_admin] = _override_require_admin
    yield client
    app.dependency_overrides.pop(require_admin, None)


# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    fake_user: Dict[str, Any] = {
        "id": "test-user",
        "email": "test@example.com",
        "metadata": {"name": "Test User"},
        "token": "fake-token",
    }
    app.dependency_overrides[require_user] = lambda: fake_user
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)


# Secrets factices: aucun test ne dépend d'un .env réel
@pytest.fixture(autouse=True)
def _fake_settings(monkeypatch):
    monkeypatch.setattr(config, "SUPABASE_URL", "https://project.supabase.test")
    monkeypatch.setattr(config, "SUPABASE_ANON", "anon-key")
    monkeypatch.setattr(config, "SUPABASE_SERVICE_KEY", "service-key")
    monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr(config, "STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setattr(config, "RESEND_API_KEY", "re_test_key")
    monkeypatch.setattr(config, "APP_URL", "https://shop.example.test")


# Aucun accès réseau à Supabase
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("storefront.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr("storefront.infra.supabase_client.get_user_supabase", lambda token: MagicMock())
    monkeypatch.setattr("storefront.health.service.health_supabase_info", lambda: {"connect_ok": True})


class FakeStore:
    """
    Base en mémoire pour les tables products / orders / order_items.
    Remplace les fonctions des repositories (mêmes signatures).
    """

    def __init__(self):
        self.products: Dict[str, Dict[str, Any]] = {}
        self.orders: List[Dict[str, Any]] = []
        self.order_items: List[Dict[str, Any]] = []
        self.failing_item_products: set = set()

    def add_product(self, product_id: str, price: float, quantity: int, name: Optional[str] = None, shipping_price: float = 0):
        self.products[product_id] = {
            "id": product_id,
            "name": name or f"Lamp {product_id}",
            "price": price,
            "shipping_price": shipping_price,
            "quantity": quantity,
        }

    # products.repository
    def fetch_products_by_ids(self, ids, columns=None):
        return [dict(self.products[i]) for i in ids if i in self.products]

    def get_product_quantity(self, product_id):
        product = self.products.get(product_id)
        return None if product is None else product["quantity"]

    def compare_and_set_quantity(self, product_id, expected, new_quantity):
        product = self.products.get(product_id)
        if product is None or product["quantity"] != expected:
            return False
        product["quantity"] = new_quantity
        return True

    # orders.repository
    def find_order_by_payment_reference(self, reference):
        return next((o for o in self.orders if o["stripe_payment_intent_id"] == reference), None)

    def insert_order(self, data):
        order = {"id": f"order-{len(self.orders) + 1:04d}-abcdef", **data}
        self.orders.append(order)
        return order

    def insert_order_item(self, data):
        if data.get("product_id") in self.failing_item_products:
            return None
        row = {"id": f"item-{len(self.order_items) + 1}", **data}
        self.order_items.append(row)
        return row

    def install(self, monkeypatch):
        for name in ("fetch_products_by_ids", "get_product_quantity", "compare_and_set_quantity"):
            monkeypatch.setattr(f"storefront.products.repository.{name}", getattr(self, name))
        for name in ("find_order_by_payment_reference", "insert_order", "insert_order_item"):
            monkeypatch.setattr(f"storefront.orders.repository.{name}", getattr(self, name))
        return self


@pytest.fixture
def fake_store(monkeypatch) -> FakeStore:
    return FakeStore().install(monkeypatch)


def stripe_line_item(product_id: Optional[str], unit_amount: int, quantity: Optional[int] = 1, name: str = "Lamp", kind: Optional[str] = None):
    """Ligne telle que renvoyée par list_line_items(expand=["data.price.product"])."""
    metadata: Dict[str, str] = {}
    if product_id:
        metadata["product_id"] = product_id
    if kind:
        metadata["kind"] = kind
    item: Dict[str, Any] = {
        "object": "item",
        "description": name,
        "price": {"unit_amount": unit_amount, "product": {"name": name, "metadata": metadata}},
    }
    if quantity is not None:
        item["quantity"] = quantity
    return item


@pytest.fixture
def stripe_line_items(monkeypatch):
    """Stub de stripe.checkout.Session.list_line_items: retourne les lignes fournies via .set(...)."""
    import stripe

    state: Dict[str, Any] = {"items": [], "calls": []}

    def _list_line_items(session_id, **kwargs):
        state["calls"].append((session_id, kwargs))
        page = MagicMock()
        page.auto_paging_iter.return_value = iter(list(state["items"]))
        return page

    monkeypatch.setattr(stripe.checkout.Session, "list_line_items", _list_line_items)

    class _Handle:
        calls = state["calls"]

        @staticmethod
        def set(items):
            state["items"] = items

    return _Handle


@pytest.fixture
def make_line_item():
    return stripe_line_item
