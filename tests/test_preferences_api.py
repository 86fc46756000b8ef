from core.merge import KEEP_SENTINEL
from models.user_settings import UserSettings
from preferences.schemas import UserSettingsDocument


def _stored(session_factory, user_id: int = 1) -> UserSettingsDocument:
    with session_factory() as db:
        return UserSettingsDocument.model_validate_json(db.get(UserSettings, user_id).document)


def test_defaults_for_new_user(client, auth_headers) -> None:
    body = client.get("/settings", headers=auth_headers).json()
    assert body["schemaVersion"] == 1
    assert body["notifications"]["smtp"]["port"] == 587
    assert "whoisApiKey" not in body
    assert "hasWhoisApiKey" not in body
    assert "key" not in body["notifications"]["bark"]


def test_nested_partial_update_leaves_siblings(client, auth_headers, session_factory) -> None:
    client.put(
        "/settings",
        headers=auth_headers,
        json={"notifications": {"smtp": {"host": "mail.example.com", "password": "smtp-pw"}}},
    )
    client.put("/settings", headers=auth_headers, json={"notifications": {"smtp": {"port": 465}}})
    doc = _stored(session_factory)
    assert doc.notifications.smtp.host == "mail.example.com"
    assert doc.notifications.smtp.port == 465
    assert doc.notifications.smtp.password == "smtp-pw"
    assert doc.notifications.bark.server_url == "https://api.day.app"


def test_secret_keep_clear_replace(client, auth_headers, session_factory) -> None:
    client.put("/settings", headers=auth_headers, json={"whoisApiKey": "k1"})

    body = client.put("/settings", headers=auth_headers, json={"whoisApiKey": KEEP_SENTINEL}).json()
    assert body["hasWhoisApiKey"] is True
    assert _stored(session_factory).whois_api_key == "k1"

    client.put("/settings", headers=auth_headers, json={"whoisApiKey": "k2"})
    assert _stored(session_factory).whois_api_key == "k2"

    body = client.put("/settings", headers=auth_headers, json={"whoisApiKey": ""}).json()
    assert "hasWhoisApiKey" not in body
    assert _stored(session_factory).whois_api_key == ""


def test_nested_secret_flags(client, auth_headers) -> None:
    body = client.put(
        "/settings",
        headers=auth_headers,
        json={"notifications": {"bark": {"enabled": True, "key": "device-key"}}},
    ).json()
    bark = body["notifications"]["bark"]
    assert bark["enabled"] is True
    assert bark["hasKey"] is True
    assert "key" not in bark
    assert "hasPassword" not in body["notifications"]["smtp"]


def test_redact_mode_off_returns_secrets(client, auth_headers, set_redact_mode) -> None:
    client.put("/settings", headers=auth_headers, json={"whoisApiKey": "k1"})
    set_redact_mode(False)
    body = client.get("/settings", headers=auth_headers).json()
    assert body["whoisApiKey"] == "k1"
    assert body["hasWhoisApiKey"] is True


def test_null_secret_is_rejected(client, auth_headers, session_factory) -> None:
    client.put("/settings", headers=auth_headers, json={"whoisApiKey": "k1"})
    resp = client.put("/settings", headers=auth_headers, json={"whoisApiKey": None})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "invalid_secret_value", "field": "whois_api_key"}
    assert _stored(session_factory).whois_api_key == "k1"


def test_unknown_keys_are_rejected(client, auth_headers) -> None:
    resp = client.put("/settings", headers=auth_headers, json={"notifications": {"slack": {"token": "x"}}})
    assert resp.status_code == 422


def test_settings_are_per_user(client, auth_headers, other_headers) -> None:
    client.put("/settings", headers=auth_headers, json={"whoisApiBaseUrl": "https://whois.example"})
    body = client.get("/settings", headers=other_headers).json()
    assert body["whoisApiBaseUrl"] == ""
