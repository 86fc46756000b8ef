# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Inventory endpoints – CRUD for servers and providers, the account snapshot
and the spreadsheet export.

Security invariants enforced by every handler
---------------------------------------------
* JWT is required on every endpoint (via ``get_current_user``).
* Records are always loaded by ``(id, user_id)``; someone else's id looks
  exactly like a missing one.
* Every outbound record passes through the ``RedactionPolicy``.  With
  redact mode on, secrets only leave the server via /reveal/*.
* Secret fields on writes go through the merge rule (``core.merge``).
"""

import io

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from sqlalchemy.orm import Session

from database import get_db
from core.audit import audit, mask_changes
from core.logger import logger
from core.merge import merge_secrets
from core.redaction import RedactionPolicy, get_redaction_policy
from core.security import get_current_user
from auth.schemas import UserInfoResponse
from inventory.lookup import own_provider, own_server
from inventory.schemas import (
    PROVIDER_SECRET_ATTRS,
    PROVIDER_SECRETS,
    SERVER_SECRET_ATTRS,
    SERVER_SECRETS,
    VALID_CATEGORIES,
    VALID_PAYMENT_METHODS,
    VALID_STATUSES,
    ProviderCreate,
    ProviderRecord,
    ProviderUpdate,
    ServerCreate,
    ServerRecord,
    ServerUpdate,
)
from models.provider import Provider
from models.server import Server
from models.user import User
from preferences.router import redacted_settings
from preferences.store import load_document

router = APIRouter(tags=["inventory"])


# ---------------------------------------------------------------------------
# Serialisation / validation helpers
# ---------------------------------------------------------------------------


def _server_out(server: Server, policy: RedactionPolicy) -> dict:
    record = ServerRecord.model_validate(server).model_dump(mode="json", by_alias=True)
    return policy.apply(record, SERVER_SECRETS)


def _provider_out(provider: Provider, policy: RedactionPolicy) -> dict:
    record = ProviderRecord.model_validate(provider).model_dump(mode="json", by_alias=True)
    return policy.apply(record, PROVIDER_SECRETS)


def _bad_request(code: str = "invalid") -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=code)


def _check_server(body, user_id: int, db: Session) -> None:
    if body.status is not None and body.status not in VALID_STATUSES:
        raise _bad_request()
    if body.provider_id is not None:
        exists = (
            db.query(Provider.id)
            .filter(Provider.id == body.provider_id, Provider.user_id == user_id)
            .first()
        )
        if not exists:
            raise _bad_request("invalid_provider")


def _check_provider(body) -> None:
    if body.categories is not None and not set(body.categories) <= VALID_CATEGORIES:
        raise _bad_request()
    if body.payment_method is not None and body.payment_method not in VALID_PAYMENT_METHODS:
        raise _bad_request()


# ---------------------------------------------------------------------------
# Servers
# ---------------------------------------------------------------------------


@router.get("/servers")
def list_servers(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    servers = (
        db.query(Server)
        .filter(Server.user_id == current_user.id)
        .order_by(Server.sort_order.asc(), Server.id.asc())
        .all()
    )
    return [_server_out(s, policy) for s in servers]


@router.get("/servers/{server_id}")
def get_server(
    server_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    return _server_out(own_server(server_id, current_user.id, db), policy)


@router.post("/servers", status_code=status.HTTP_201_CREATED)
def create_server(
    body: ServerCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    _check_server(body, current_user.id, db)

    server = Server(
        user_id=current_user.id,
        **body.model_dump(exclude=set(SERVER_SECRET_ATTRS)),
    )
    changed = merge_secrets(server, body, SERVER_SECRET_ATTRS)
    db.add(server)
    db.flush()

    detail = f"server_id={server.id}, name={server.name}"
    if changed:
        detail += ", " + mask_changes(changed, set(SERVER_SECRET_ATTRS))
    audit(db, current_user.id, "server_create", detail, request)
    db.commit()
    db.refresh(server)
    return _server_out(server, policy)


@router.put("/servers/{server_id}")
def update_server(
    server_id: int,
    body: ServerUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    """
    Partial update.  Plain fields change only when provided and non-null,
    except ``providerId: null`` which unlinks the provider.
    Secret fields: omitted or ``"__KEEP__"`` keeps, ``""`` clears, anything
    else replaces.
    """
    server = own_server(server_id, current_user.id, db)
    _check_server(body, current_user.id, db)

    plain = body.model_dump(exclude_unset=True, exclude_none=True, exclude=set(SERVER_SECRET_ATTRS))
    # explicit null unlinks the provider
    if "provider_id" in body.model_fields_set and body.provider_id is None:
        plain["provider_id"] = None
    for name, value in plain.items():
        setattr(server, name, value)
    changed = list(plain) + merge_secrets(server, body, SERVER_SECRET_ATTRS)

    detail = f"server_id={server_id}"
    if changed:
        detail += ", " + mask_changes(changed, set(SERVER_SECRET_ATTRS))
    audit(db, current_user.id, "server_update", detail, request)
    db.commit()
    db.refresh(server)
    return _server_out(server, policy)


@router.delete("/servers/{server_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_server(
    server_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    server = own_server(server_id, current_user.id, db)
    detail = f"server_id={server_id}, name={server.name}"
    db.delete(server)
    audit(db, current_user.id, "server_delete", detail, request)
    db.commit()


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


@router.get("/providers")
def list_providers(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    providers = (
        db.query(Provider)
        .filter(Provider.user_id == current_user.id)
        .order_by(Provider.sort_order.asc(), Provider.id.asc())
        .all()
    )
    return [_provider_out(p, policy) for p in providers]


@router.get("/providers/{provider_id}")
def get_provider(
    provider_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    return _provider_out(own_provider(provider_id, current_user.id, db), policy)


@router.post("/providers", status_code=status.HTTP_201_CREATED)
def create_provider(
    body: ProviderCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    _check_provider(body)

    data = body.model_dump(exclude=set(PROVIDER_SECRET_ATTRS))
    data["categories"] = ",".join(data["categories"])
    provider = Provider(user_id=current_user.id, **data)
    changed = merge_secrets(provider, body, PROVIDER_SECRET_ATTRS)
    db.add(provider)
    db.flush()

    detail = f"provider_id={provider.id}, name={provider.name}"
    if changed:
        detail += ", " + mask_changes(changed, set(PROVIDER_SECRET_ATTRS))
    audit(db, current_user.id, "provider_create", detail, request)
    db.commit()
    db.refresh(provider)
    return _provider_out(provider, policy)


@router.put("/providers/{provider_id}")
def update_provider(
    provider_id: int,
    body: ProviderUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    """Partial update; same secret semantics as PUT /servers/{id}."""
    provider = own_provider(provider_id, current_user.id, db)
    _check_provider(body)

    plain = body.model_dump(exclude_unset=True, exclude_none=True, exclude=set(PROVIDER_SECRET_ATTRS))
    if "categories" in plain:
        plain["categories"] = ",".join(plain["categories"])
    for name, value in plain.items():
        setattr(provider, name, value)
    changed = list(plain) + merge_secrets(provider, body, PROVIDER_SECRET_ATTRS)

    detail = f"provider_id={provider_id}"
    if changed:
        detail += ", " + mask_changes(changed, set(PROVIDER_SECRET_ATTRS))
    audit(db, current_user.id, "provider_update", detail, request)
    db.commit()
    db.refresh(provider)
    return _provider_out(provider, policy)


@router.delete("/providers/{provider_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_provider(
    provider_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    provider = own_provider(provider_id, current_user.id, db)
    detail = f"provider_id={provider_id}, name={provider.name}"
    # Unlink servers explicitly; SQLite does not enforce ON DELETE SET NULL
    # unless foreign keys are switched on.
    db.query(Server).filter(Server.provider_id == provider_id).update(
        {Server.provider_id: None}, synchronize_session=False
    )
    db.delete(provider)
    audit(db, current_user.id, "provider_delete", detail, request)
    db.commit()


# ---------------------------------------------------------------------------
# GET /me  – everything the signed-in user owns, redacted
# ---------------------------------------------------------------------------


@router.get("/me")
def snapshot(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    servers = db.query(Server).filter(Server.user_id == current_user.id).order_by(Server.id).all()
    providers = db.query(Provider).filter(Provider.user_id == current_user.id).order_by(Provider.id).all()
    return {
        "user": UserInfoResponse.model_validate(current_user).model_dump(mode="json", by_alias=True),
        "data": {
            "servers": [_server_out(s, policy) for s in servers],
            "providers": [_provider_out(p, policy) for p in providers],
            "settings": redacted_settings(load_document(db, current_user.id), policy),
        },
    }


# ---------------------------------------------------------------------------
# GET /me/export  – servers and providers as an Excel workbook
# ---------------------------------------------------------------------------
# Secret columns follow the redaction policy: with redact mode on a stored
# secret is written as ``******``, otherwise as plaintext.

_HEADER_FONT  = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_HEADER_FILL  = PatternFill(start_color="6C63FF", end_color="6C63FF", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_THIN_BORDER  = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)
_MASK = "******"

# (header, wire key, presence flag or None)
_SERVER_COLUMNS = [
    ("Name", "name", None),
    ("IP", "ip", None),
    ("Provider", "provider", None),
    ("Region", "region", None),
    ("OS", "os", None),
    ("Status", "status", None),
    ("Expires", "expirationDate", None),
    ("Panel URL", "panelUrl", None),
    ("Panel User", "username", None),
    ("Panel Password", "password", "hasPassword"),
    ("SSH Port", "sshPort", None),
    ("SSH User", "sshUsername", None),
    ("SSH Password", "sshPassword", "hasSshPassword"),
    ("Provider URL", "providerUrl", None),
    ("Provider User", "providerUsername", None),
    ("Provider Password", "providerPassword", "hasProviderPassword"),
    ("Notes", "notes", None),
]
_PROVIDER_COLUMNS = [
    ("Name", "name", None),
    ("Login URL", "loginUrl", None),
    ("Username", "username", None),
    ("Password", "password", "hasPassword"),
    ("Categories", "categories", None),
    ("Payment Method", "paymentMethod", None),
    ("Payment Account", "paymentAccount", None),
]


def _cell(record: dict, key: str, flag) -> str:
    value = record.get(key)
    if value is None and flag and record.get(flag):
        return _MASK
    if isinstance(value, list):
        return ", ".join(value)
    return "" if value is None else str(value)


def _write_sheet(ws, columns, records) -> None:
    ws.append([header for header, _, _ in columns])
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN
        cell.border = _THIN_BORDER

    for record in records:
        ws.append([_cell(record, key, flag) for _, key, flag in columns])
        for cell in ws[ws.max_row]:
            cell.border = _THIN_BORDER

    for idx in range(1, len(columns) + 1):
        ws.column_dimensions[chr(64 + idx)].width = 20


@router.get("/me/export")
def export_inventory(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    """Stream an .xlsx workbook; nothing is written to disk on the server."""
    servers = db.query(Server).filter(Server.user_id == current_user.id).order_by(Server.name).all()
    providers = db.query(Provider).filter(Provider.user_id == current_user.id).order_by(Provider.name).all()

    wb = Workbook()
    ws = wb.active
    ws.title = "Servers"
    _write_sheet(ws, _SERVER_COLUMNS, [_server_out(s, policy) for s in servers])
    _write_sheet(wb.create_sheet("Providers"), _PROVIDER_COLUMNS, [_provider_out(p, policy) for p in providers])

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)

    audit(
        db, current_user.id, "inventory_export",
        f"servers={len(servers)}, providers={len(providers)}, redacted={policy.redact_mode}",
        request,
    )
    db.commit()
    logger.info("inventory export | user=%d servers=%d providers=%d", current_user.id, len(servers), len(providers))

    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="inventory.xlsx"'},
    )
