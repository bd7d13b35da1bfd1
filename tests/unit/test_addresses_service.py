import pytest
from fastapi import HTTPException

from storefront.addresses import repository as addresses_repository
from storefront.addresses import service as addresses_service

USER = {"id": "user-1", "token": "jwt"}


class _AddressTable:
    """Table shipping_addresses en mémoire (mêmes signatures que le repository)."""

    def __init__(self):
        self.rows = []

    def default_ids(self, user_id):
        return [r["id"] for r in self.rows if r["user_id"] == user_id and r["is_default"]]

    def clear_defaults(self, token, user_id):
        for r in self.rows:
            if r["user_id"] == user_id:
                r["is_default"] = False

    def insert_address(self, token, data):
        row = {"id": f"addr-{len(self.rows) + 1}", **data}
        self.rows.append(row)
        return row

    def get_address(self, token, user_id, address_id):
        return next((r for r in self.rows if r["id"] == address_id and r["user_id"] == user_id), None)

    def update_address(self, token, user_id, address_id, data):
        row = self.get_address(token, user_id, address_id)
        if row:
            row.update(data)
        return row


@pytest.fixture
def table(monkeypatch):
    t = _AddressTable()
    for name in ("clear_defaults", "insert_address", "get_address", "update_address"):
        monkeypatch.setattr(addresses_repository, name, getattr(t, name))
    return t


def _address(**extra):
    return {"full_name": "Ada", "address_line1": "1 Main St", "city": "Austin", "state": "TX", "postal_code": "78701", **extra}


def test_new_default_clears_previous_default(table):
    first = addresses_service.create_address(USER, _address(is_default=True))
    second = addresses_service.create_address(USER, _address(is_default=True))
    assert table.default_ids("user-1") == [second["id"]]
    assert first["is_default"] is False


def test_non_default_address_keeps_existing_default(table):
    first = addresses_service.create_address(USER, _address(is_default=True))
    addresses_service.create_address(USER, _address())
    assert table.default_ids("user-1") == [first["id"]]


def test_unknown_fields_are_dropped(table):
    row = addresses_service.create_address(USER, _address(user_id="someone-else", id="forced"))
    assert row["user_id"] == "user-1"
    assert row["id"] == "addr-1"


def test_set_default_address(table):
    a = addresses_service.create_address(USER, _address(is_default=True))
    b = addresses_service.create_address(USER, _address())
    addresses_service.set_default_address(USER, b["id"])
    assert table.default_ids("user-1") == [b["id"]]
    assert a["is_default"] is False


def test_set_default_on_unknown_address_is_404(table):
    addresses_service.create_address(USER, _address(is_default=True))
    with pytest.raises(HTTPException) as exc:
        addresses_service.set_default_address(USER, "missing")
    assert exc.value.status_code == 404
    # Le défaut existant n'a pas été effacé
    assert table.default_ids("user-1") == ["addr-1"]


def test_update_to_default_clears_others(table):
    a = addresses_service.create_address(USER, _address(is_default=True))
    b = addresses_service.create_address(USER, _address())
    addresses_service.update_address(USER, b["id"], {"is_default": True, "city": "Dallas"})
    assert table.default_ids("user-1") == [b["id"]]
    assert b["city"] == "Dallas"
    assert a["is_default"] is False


def test_update_unknown_address_to_default_keeps_existing_default(table):
    addresses_service.create_address(USER, _address(is_default=True))
    with pytest.raises(HTTPException) as exc:
        addresses_service.update_address(USER, "missing", {"is_default": True})
    assert exc.value.status_code == 404
    assert table.default_ids("user-1") == ["addr-1"]


def test_update_other_users_address_to_default_is_404(table):
    addresses_service.create_address(USER, _address(is_default=True))
    other = {"id": "user-2", "token": "jwt-2"}
    with pytest.raises(HTTPException):
        addresses_service.update_address(other, "addr-1", {"is_default": True})
    assert table.default_ids("user-1") == ["addr-1"]
