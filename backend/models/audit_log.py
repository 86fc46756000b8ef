# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""AuditLog ORM model – one row per state-changing or secret-touching action."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action = Column(String(64), nullable=False, index=True)   # e.g. "server_update"
    detail = Column(Text, nullable=True)                      # never contains secret values
    request_ip = Column(String(45), nullable=True)            # IPv6-sized
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
