# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Server ORM model."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class Server(Base):
    __tablename__ = "servers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Cascade delete: removing a user removes all their servers.
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    ip = Column(String(64), nullable=False, server_default="")
    provider = Column(String(255), nullable=False, server_default="")   # display name
    provider_id = Column(
        Integer,
        ForeignKey("providers.id", ondelete="SET NULL"),
        nullable=True,
    )
    region = Column(String(128), nullable=False, server_default="")
    os = Column(String(128), nullable=False, server_default="")
    status = Column(String(16), nullable=False, server_default="running")
    expiration_date = Column(String(32), nullable=False, server_default="")

    # Panel
    panel_url = Column(String(2048), nullable=True)
    username = Column(String(255), nullable=True)
    password = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Provider console
    provider_url = Column(String(2048), nullable=True)
    provider_username = Column(String(255), nullable=True)
    provider_password = Column(Text, nullable=True)

    # SSH
    ssh_port = Column(Integer, nullable=True)
    ssh_username = Column(String(255), nullable=True)
    ssh_password = Column(Text, nullable=True)

    sort_order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
