import pytest

from conftest import PASSWORD, flip_bit, open_envelope
from core.codec import DecryptionError, decode_session_key, generate_session_key
from core.config import settings
from models.audit_log import AuditLog


@pytest.fixture()
def server(client, auth_headers) -> dict:
    resp = client.post(
        "/servers",
        headers=auth_headers,
        json={"name": "db-1", "password": "panel-pw", "sshPassword": "ssh-pw"},
    )
    assert resp.status_code == 201
    return resp.json()


def test_server_secrets_come_back_as_envelopes(client, server, reveal_headers, reveal_key) -> None:
    resp = client.get(f"/reveal/servers/{server['id']}", headers=reveal_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert set(body) == {"panelPassword", "sshPassword"}
    assert set(body["panelPassword"]) == {"iv", "tag", "data"}
    assert open_envelope(reveal_key, body["panelPassword"]) == "panel-pw"
    assert open_envelope(reveal_key, body["sshPassword"]) == "ssh-pw"
    assert "panel-pw" not in resp.text


def test_each_reveal_uses_a_fresh_nonce(client, server, reveal_headers) -> None:
    first = client.get(f"/reveal/servers/{server['id']}", headers=reveal_headers).json()
    second = client.get(f"/reveal/servers/{server['id']}", headers=reveal_headers).json()
    assert first["panelPassword"]["iv"] != second["panelPassword"]["iv"]
    assert first["panelPassword"]["data"] != second["panelPassword"]["data"]


def test_tampered_envelope_does_not_open(client, server, reveal_headers, reveal_key) -> None:
    env = client.get(f"/reveal/servers/{server['id']}", headers=reveal_headers).json()["panelPassword"]
    with pytest.raises(DecryptionError):
        open_envelope(reveal_key, {**env, "tag": flip_bit(env["tag"])})


def test_envelope_is_bound_to_the_session_key(client, server, reveal_headers) -> None:
    env = client.get(f"/reveal/servers/{server['id']}", headers=reveal_headers).json()["panelPassword"]
    with pytest.raises(DecryptionError):
        open_envelope(generate_session_key(), env)


def test_reveal_requires_token(client, server, reveal_key) -> None:
    resp = client.get(f"/reveal/servers/{server['id']}", headers={"x-reveal-key": reveal_key})
    assert resp.status_code == 401


def test_token_is_checked_before_key(client, server) -> None:
    assert client.get(f"/reveal/servers/{server['id']}").status_code == 401


@pytest.mark.parametrize("bad_key", [None, "", "not base64!!", "c2hvcnQ="])
def test_reveal_requires_a_valid_key(client, server, auth_headers, bad_key) -> None:
    headers = dict(auth_headers)
    if bad_key is not None:
        headers["x-reveal-key"] = bad_key
    resp = client.get(f"/reveal/servers/{server['id']}", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "invalid_reveal_key"


def test_foreign_record_looks_missing(client, server, other_headers, reveal_key) -> None:
    headers = {**other_headers, "x-reveal-key": reveal_key}
    foreign = client.get(f"/reveal/servers/{server['id']}", headers=headers)
    missing = client.get("/reveal/servers/9999", headers=headers)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json() == {"detail": "not_found"}


def test_reveal_after_clear_omits_field(client, server, auth_headers, reveal_headers) -> None:
    client.put(f"/servers/{server['id']}", headers=auth_headers, json={"sshPassword": ""})
    body = client.get(f"/reveal/servers/{server['id']}", headers=reveal_headers).json()
    assert set(body) == {"panelPassword"}


def test_provider_password(client, auth_headers, reveal_headers, reveal_key) -> None:
    provider = client.post("/providers", headers=auth_headers, json={"name": "aws", "password": "root-pw"}).json()
    body = client.get(f"/reveal/providers/{provider['id']}", headers=reveal_headers).json()
    assert open_envelope(reveal_key, body["password"]) == "root-pw"

    bare = client.post("/providers", headers=auth_headers, json={"name": "gcp"}).json()
    assert client.get(f"/reveal/providers/{bare['id']}", headers=reveal_headers).json() == {}


def test_settings_secrets(client, auth_headers, reveal_headers, reveal_key) -> None:
    assert client.get("/reveal/settings/key", headers=reveal_headers).json() == {}

    client.put(
        "/settings",
        headers=auth_headers,
        json={
            "whoisApiKey": "whois-123",
            "notifications": {"bark": {"key": "bark-456"}, "smtp": {"password": "smtp-789"}},
        },
    )
    for path in ("/reveal/settings/key", "/reveal/settings/whois-key"):
        body = client.get(path, headers=reveal_headers).json()
        assert open_envelope(reveal_key, body["whoisApiKey"]) == "whois-123"

    body = client.get("/reveal/settings/bark-key", headers=reveal_headers).json()
    assert open_envelope(reveal_key, body["barkKey"]) == "bark-456"

    body = client.get("/reveal/settings/smtp-password", headers=reveal_headers).json()
    assert open_envelope(reveal_key, body["smtpPassword"]) == "smtp-789"


def test_key_check_endpoint(client, auth_headers, reveal_headers) -> None:
    assert client.get("/reveal/test", headers=reveal_headers).json() == {"ok": True}
    assert client.get("/reveal/test", headers=auth_headers).status_code == 400


def test_reveal_session_step_up(client, auth_headers) -> None:
    bad = client.post("/reveal/session", headers=auth_headers, json={"currentPassword": "nope"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "invalid_current_password"

    first = client.post("/reveal/session", headers=auth_headers, json={"currentPassword": PASSWORD}).json()["key"]
    second = client.post("/reveal/session", headers=auth_headers, json={"currentPassword": PASSWORD}).json()["key"]
    assert len(decode_session_key(first)) == 32
    assert first != second


def test_reveals_are_not_audited_by_default(client, server, reveal_headers, session_factory) -> None:
    client.get(f"/reveal/servers/{server['id']}", headers=reveal_headers)
    with session_factory() as db:
        assert db.query(AuditLog).filter(AuditLog.action == "secret_reveal").count() == 0


def test_reveal_audit_names_fields_only(client, server, reveal_headers, session_factory, monkeypatch) -> None:
    monkeypatch.setattr(settings, "audit_reveals", True)
    client.get(f"/reveal/servers/{server['id']}", headers=reveal_headers)
    with session_factory() as db:
        rows = db.query(AuditLog).filter(AuditLog.action == "secret_reveal").all()
    assert len(rows) == 1
    assert "panel_password" in rows[0].detail
    assert "panel-pw" not in rows[0].detail
