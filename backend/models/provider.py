# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Provider ORM model – a hosting / registrar account."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class Provider(Base):
    __tablename__ = "providers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    login_url = Column(String(2048), nullable=False, server_default="")
    username = Column(String(255), nullable=False, server_default="")
    # Console password.  Stored as-is; "" means no secret.
    password = Column(Text, nullable=True)
    # Comma separated subset of {"server", "domain"}
    categories = Column(String(64), nullable=False, server_default="")
    payment_method = Column(String(32), nullable=False, server_default="Other")
    payment_account = Column(String(255), nullable=False, server_default="")
    sort_order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
