import hashlib
import hmac
import json
import time

import pytest
from fastapi import HTTPException

from storefront import config
from storefront.config import ConfigError
from storefront.payments import stripe_client

SECRET = "whsec_unit"


def _sign(payload: bytes, secret: str = SECRET) -> str:
    ts = int(time.time())
    signed = f"{ts}.{payload.decode('utf-8')}".encode("utf-8")
    sig = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={sig}"


@pytest.fixture(autouse=True)
def _secret(monkeypatch):
    monkeypatch.setattr(config, "STRIPE_WEBHOOK_SECRET", SECRET)


def test_parse_event_accepts_valid_signature():
    payload = json.dumps({"id": "evt_1", "object": "event", "type": "checkout.session.completed"}).encode()
    event = stripe_client.parse_event(payload, _sign(payload))
    assert event["type"] == "checkout.session.completed"
    assert isinstance(event, dict)


def test_parse_event_rejects_missing_signature():
    with pytest.raises(HTTPException) as exc:
        stripe_client.parse_event(b"{}", None)
    assert exc.value.status_code == 400
    assert exc.value.detail == "No signature provided"


def test_parse_event_rejects_wrong_secret():
    payload = json.dumps({"id": "evt_1", "object": "event"}).encode()
    with pytest.raises(HTTPException) as exc:
        stripe_client.parse_event(payload, _sign(payload, secret="whsec_other"))
    assert exc.value.status_code == 400
    assert exc.value.detail == "Invalid signature"


def test_parse_event_rejects_tampered_payload():
    payload = json.dumps({"id": "evt_1", "object": "event", "amount": 100}).encode()
    header = _sign(payload)
    tampered = payload.replace(b"100", b"1")
    with pytest.raises(HTTPException) as exc:
        stripe_client.parse_event(tampered, header)
    assert exc.value.detail == "Invalid signature"


def test_parse_event_requires_webhook_secret(monkeypatch):
    monkeypatch.setattr(config, "STRIPE_WEBHOOK_SECRET", "")
    with pytest.raises(ConfigError):
        stripe_client.parse_event(b"{}", "t=1,v1=abc")


def test_as_dict_accepts_plain_dicts_and_stripe_objects():
    assert stripe_client.as_dict({"a": 1}) == {"a": 1}
    assert stripe_client.as_dict(None) == {}

    class _Obj:
        def to_dict(self):
            return {"id": "cs_1"}

    assert stripe_client.as_dict(_Obj()) == {"id": "cs_1"}
