def test_health_reports_integrations(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["integrations"] == {"supabase": True, "stripe": True, "stripe_webhook": True, "resend": True}
    assert body["rate_limit"]["enabled"] is False


def test_health_never_leaks_secrets(client):
    assert "sk_test_dummy" not in client.get("/health").text


def test_health_supabase(client):
    res = client.get("/health/supabase")
    assert res.status_code == 200
    assert res.json() == {"connect_ok": True}


def test_security_headers(client):
    res = client.get("/health")
    assert res.headers.get("X-Content-Type-Options") == "nosniff"


def test_unknown_route_uses_error_shape(client):
    res = client.get("/nope")
    assert res.status_code == 404
    assert res.json() == {"error": "Not Found"}
