import io

from openpyxl import load_workbook

from core.merge import KEEP_SENTINEL
from models.audit_log import AuditLog
from models.server import Server

SERVER = {
    "name": "edge-1",
    "ip": "203.0.113.7",
    "region": "fra",
    "username": "root",
    "password": "OldPass1",
    "sshPort": 22,
    "sshUsername": "root",
    "sshPassword": "ssh-secret",
}


def _create_server(client, headers, **overrides) -> dict:
    resp = client.post("/servers", headers=headers, json={**SERVER, **overrides})
    assert resp.status_code == 201, resp.text
    return resp.json()


def _stored(session_factory, server_id: int) -> Server:
    with session_factory() as db:
        return db.get(Server, server_id)


def test_create_returns_redacted_record(client, auth_headers) -> None:
    body = _create_server(client, auth_headers)
    assert body["name"] == "edge-1"
    assert body["sshPort"] == 22
    assert body["hasPassword"] is True
    assert body["hasSshPassword"] is True
    assert "password" not in body
    assert "sshPassword" not in body
    # never set: neither value nor flag
    assert "providerPassword" not in body
    assert "hasProviderPassword" not in body


def test_list_is_redacted_and_scoped_to_owner(client, auth_headers, other_headers) -> None:
    _create_server(client, auth_headers)
    _create_server(client, other_headers, name="bob-box")

    mine = client.get("/servers", headers=auth_headers).json()
    assert [s["name"] for s in mine] == ["edge-1"]
    assert all("password" not in s for s in mine)


def test_redact_mode_off_includes_plaintext(client, auth_headers, set_redact_mode) -> None:
    server = _create_server(client, auth_headers)
    set_redact_mode(False)
    body = client.get(f"/servers/{server['id']}", headers=auth_headers).json()
    assert body["password"] == "OldPass1"
    assert body["hasPassword"] is True
    set_redact_mode(True)
    body = client.get(f"/servers/{server['id']}", headers=auth_headers).json()
    assert "password" not in body


def test_update_with_sentinel_keeps_secret(client, auth_headers, session_factory) -> None:
    server = _create_server(client, auth_headers)
    resp = client.put(
        f"/servers/{server['id']}",
        headers=auth_headers,
        json={"name": "edge-1b", "password": KEEP_SENTINEL, "sshPassword": KEEP_SENTINEL},
    )
    assert resp.status_code == 200
    stored = _stored(session_factory, server["id"])
    assert stored.name == "edge-1b"
    assert stored.password == "OldPass1"
    assert stored.ssh_password == "ssh-secret"


def test_update_with_empty_string_clears_secret(client, auth_headers, session_factory) -> None:
    server = _create_server(client, auth_headers)
    resp = client.put(f"/servers/{server['id']}", headers=auth_headers, json={"password": ""})
    assert resp.status_code == 200
    assert "hasPassword" not in resp.json()
    assert _stored(session_factory, server["id"]).password == ""


def test_update_with_new_value_replaces_secret(client, auth_headers, session_factory) -> None:
    server = _create_server(client, auth_headers)
    client.put(f"/servers/{server['id']}", headers=auth_headers, json={"password": "NewPass2"})
    assert _stored(session_factory, server["id"]).password == "NewPass2"


def test_omitted_secret_is_kept(client, auth_headers, session_factory) -> None:
    server = _create_server(client, auth_headers)
    client.put(f"/servers/{server['id']}", headers=auth_headers, json={"region": "ams"})
    stored = _stored(session_factory, server["id"])
    assert stored.region == "ams"
    assert stored.password == "OldPass1"
    assert stored.ssh_password == "ssh-secret"


def test_null_secret_is_rejected(client, auth_headers, session_factory) -> None:
    server = _create_server(client, auth_headers)
    resp = client.put(f"/servers/{server['id']}", headers=auth_headers, json={"name": "x", "password": None})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "invalid_secret_value", "field": "password"}
    stored = _stored(session_factory, server["id"])
    assert stored.name == "edge-1"
    assert stored.password == "OldPass1"


def test_invalid_status(client, auth_headers) -> None:
    resp = client.post("/servers", headers=auth_headers, json={**SERVER, "status": "exploded"})
    assert resp.status_code == 400


def test_foreign_records_look_missing(client, auth_headers, other_headers) -> None:
    server = _create_server(client, other_headers)
    foreign = client.put(f"/servers/{server['id']}", headers=auth_headers, json={"password": "pwned"})
    missing = client.put("/servers/9999", headers=auth_headers, json={"password": "pwned"})
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()
    assert client.delete(f"/servers/{server['id']}", headers=auth_headers).status_code == 404


def test_cannot_link_someone_elses_provider(client, auth_headers, other_headers) -> None:
    provider = client.post("/providers", headers=other_headers, json={"name": "bob-cloud"}).json()
    resp = client.post("/servers", headers=auth_headers, json={**SERVER, "providerId": provider["id"]})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "invalid_provider"


def test_delete_server(client, auth_headers) -> None:
    server = _create_server(client, auth_headers)
    assert client.delete(f"/servers/{server['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/servers/{server['id']}", headers=auth_headers).status_code == 404


def test_provider_crud_and_merge(client, auth_headers) -> None:
    resp = client.post(
        "/providers",
        headers=auth_headers,
        json={"name": "hetzner", "username": "me", "password": "console-1", "categories": ["server"]},
    )
    assert resp.status_code == 201
    provider = resp.json()
    assert provider["categories"] == ["server"]
    assert provider["hasPassword"] is True
    assert "password" not in provider

    updated = client.put(
        f"/providers/{provider['id']}",
        headers=auth_headers,
        json={"categories": ["server", "domain"], "password": KEEP_SENTINEL},
    ).json()
    assert updated["categories"] == ["server", "domain"]
    assert updated["hasPassword"] is True

    cleared = client.put(f"/providers/{provider['id']}", headers=auth_headers, json={"password": ""}).json()
    assert "hasPassword" not in cleared

    assert client.delete(f"/providers/{provider['id']}", headers=auth_headers).status_code == 204
    assert client.get("/providers", headers=auth_headers).json() == []


def test_provider_rejects_unknown_category(client, auth_headers) -> None:
    resp = client.post("/providers", headers=auth_headers, json={"name": "x", "categories": ["toaster"]})
    assert resp.status_code == 400


def test_deleting_provider_unlinks_servers(client, auth_headers, session_factory) -> None:
    provider = client.post("/providers", headers=auth_headers, json={"name": "vultr"}).json()
    server = _create_server(client, auth_headers, providerId=provider["id"])
    client.delete(f"/providers/{provider['id']}", headers=auth_headers)
    assert _stored(session_factory, server["id"]).provider_id is None


def test_snapshot_is_redacted(client, auth_headers) -> None:
    _create_server(client, auth_headers)
    client.put("/settings", headers=auth_headers, json={"whoisApiKey": "wk-1"})
    body = client.get("/me", headers=auth_headers).json()
    assert body["user"]["username"] == "alice"
    assert body["data"]["servers"][0]["hasPassword"] is True
    assert "password" not in body["data"]["servers"][0]
    assert body["data"]["settings"]["hasWhoisApiKey"] is True
    assert "whoisApiKey" not in body["data"]["settings"]


def test_export_masks_secrets_in_redact_mode(client, auth_headers, set_redact_mode) -> None:
    _create_server(client, auth_headers)
    resp = client.get("/me/export", headers=auth_headers)
    assert resp.status_code == 200
    ws = load_workbook(io.BytesIO(resp.content))["Servers"]
    header = [c.value for c in ws[1]]
    row = [c.value for c in ws[2]]
    assert row[header.index("Panel Password")] == "******"
    assert row[header.index("SSH Password")] == "******"
    assert row[header.index("Provider Password")] in (None, "")

    set_redact_mode(False)
    resp = client.get("/me/export", headers=auth_headers)
    ws = load_workbook(io.BytesIO(resp.content))["Servers"]
    assert [c.value for c in ws[2]][header.index("Panel Password")] == "OldPass1"


def test_audit_rows_never_contain_secrets(client, auth_headers, session_factory) -> None:
    server = _create_server(client, auth_headers)
    client.put(f"/servers/{server['id']}", headers=auth_headers, json={"password": "NewPass2"})
    with session_factory() as db:
        details = [row.detail or "" for row in db.query(AuditLog).all()]
    assert any("password=******" in d for d in details)
    assert not any("OldPass1" in d or "NewPass2" in d or "ssh-secret" in d for d in details)


def test_null_provider_id_unlinks_server(client, auth_headers, session_factory) -> None:
    provider = client.post("/providers", headers=auth_headers, json={"name": "vultr"}).json()
    server = _create_server(client, auth_headers, providerId=provider["id"])
    assert server["providerId"] == provider["id"]

    # omitted leaves the link alone
    body = client.put(f"/servers/{server['id']}", headers=auth_headers, json={"region": "ams"}).json()
    assert body["providerId"] == provider["id"]

    body = client.put(f"/servers/{server['id']}", headers=auth_headers, json={"providerId": None}).json()
    assert body["providerId"] is None
    assert _stored(session_factory, server["id"]).provider_id is None
