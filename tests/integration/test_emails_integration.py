import httpx
import pytest
from unittest.mock import MagicMock


SERVICE_HEADERS = {"Authorization": "Bearer service-key"}


@pytest.fixture
def resend(monkeypatch):
    calls = []

    def _post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "headers": headers})
        return httpx.Response(200, json={"id": "email_123"}, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx, "post", _post)
    return calls


def test_order_confirmation_with_service_key(monkeypatch, client):
    send = MagicMock(return_value="email_1")
    monkeypatch.setattr("storefront.notifications.service.send_order_confirmation", send)
    res = client.post(
        "/api/v1/emails/order-confirmation",
        json={"orderId": "order-1", "userEmail": "jane@example.com", "userName": "Jane"},
        headers=SERVICE_HEADERS,
    )
    assert res.status_code == 200
    assert res.json() == {"success": True, "emailId": "email_1"}
    send.assert_called_once_with("order-1", "jane@example.com", "Jane")


def test_order_confirmation_missing_fields(client):
    res = client.post("/api/v1/emails/order-confirmation", json={"orderId": "order-1"}, headers=SERVICE_HEADERS)
    assert res.status_code == 400
    assert res.json() == {"error": "Missing required fields"}


def test_order_confirmation_rejects_anonymous_caller(client):
    res = client.post("/api/v1/emails/order-confirmation", json={"orderId": "o", "userEmail": "e", "userName": "n"})
    assert res.status_code == 401


def test_order_confirmation_rejects_non_admin_user(monkeypatch, client):
    monkeypatch.setattr("storefront.auth.repository.get_user_from_access_token", lambda token: {"id": "u1"})
    monkeypatch.setattr("storefront.auth.repository.is_admin", lambda user_id: False)
    res = client.post(
        "/api/v1/emails/order-confirmation",
        json={"orderId": "o", "userEmail": "e", "userName": "n"},
        headers={"Authorization": "Bearer user-token"},
    )
    assert res.status_code == 403


def test_order_confirmation_unknown_order_is_500(monkeypatch, client):
    from storefront.notifications import service

    def _missing(order_id, user_email, user_name):
        raise service.OrderNotFound("Order not found")

    monkeypatch.setattr(service, "send_order_confirmation", _missing)
    res = client.post(
        "/api/v1/emails/order-confirmation",
        json={"orderId": "nope", "userEmail": "jane@example.com", "userName": "Jane"},
        headers=SERVICE_HEADERS,
    )
    assert res.status_code == 500
    assert res.json() == {"error": "Order not found"}


def test_shipping_notification_passes_tracking_number(monkeypatch, client):
    send = MagicMock(return_value="email_2")
    monkeypatch.setattr("storefront.notifications.service.send_shipping_notification", send)
    res = client.post(
        "/api/v1/emails/shipping-notification",
        json={"orderId": "order-1", "userEmail": "jane@example.com", "userName": "Jane", "trackingNumber": "1Z999"},
        headers=SERVICE_HEADERS,
    )
    assert res.status_code == 200
    assert res.json()["emailId"] == "email_2"
    send.assert_called_once_with("order-1", "jane@example.com", "Jane", tracking_number="1Z999")


def test_contact_form_reaches_shop_inbox(client, resend):
    res = client.post(
        "/api/v1/emails/contact",
        json={"name": "Jane", "email": "jane@example.com", "message": "Hello\nDo you ship to Canada?"},
    )
    assert res.status_code == 200
    assert res.json() == {"success": True, "emailId": "email_123"}
    sent = resend[0]["json"]
    assert sent["to"] == ["info@lordsmithlamps.com"]
    assert sent["reply_to"] == "jane@example.com"
    assert sent["subject"] == "New Contact Form Submission from Jane"
    assert "Do you ship to Canada?" in sent["text"]
    assert resend[0]["headers"]["Authorization"] == "Bearer re_test_key"


def test_contact_form_requires_all_fields(client, resend):
    res = client.post("/api/v1/emails/contact", json={"name": "Jane", "email": "", "message": "Hi"})
    assert res.status_code == 400
    assert resend == []


def test_contact_form_resend_failure_is_500(monkeypatch, client):
    def _refused(url, json=None, headers=None, timeout=None):
        return httpx.Response(422, json={"message": "invalid from"}, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx, "post", _refused)
    res = client.post("/api/v1/emails/contact", json={"name": "Jane", "email": "jane@example.com", "message": "Hi"})
    assert res.status_code == 500
    assert "Failed to send email" in res.json()["error"]


def test_contact_form_without_resend_key_is_config_error(monkeypatch, client, resend):
    from storefront import config

    monkeypatch.setattr(config, "RESEND_API_KEY", "")
    res = client.post("/api/v1/emails/contact", json={"name": "Jane", "email": "jane@example.com", "message": "Hi"})
    assert res.status_code == 500
    assert "RESEND_API_KEY" in res.json()["error"]
    assert resend == []
