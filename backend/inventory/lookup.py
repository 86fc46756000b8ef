# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Ownership-checked record loaders shared by the inventory and reveal routers.

A record that does not exist and a record that belongs to another user
produce the same 404 ``not_found``, so a caller cannot probe for ids.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from models.provider import Provider
from models.server import Server


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not_found")


def own_server(server_id: int, user_id: int, db: Session) -> Server:
    server = (
        db.query(Server)
        .filter(Server.id == server_id, Server.user_id == user_id)
        .first()
    )
    if server is None:
        raise _not_found()
    return server


def own_provider(provider_id: int, user_id: int, db: Session) -> Provider:
    provider = (
        db.query(Provider)
        .filter(Provider.id == provider_id, Provider.user_id == user_id)
        .first()
    )
    if provider is None:
        raise _not_found()
    return provider
