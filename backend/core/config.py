# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Application configuration.
All secrets and connection strings are loaded exclusively from environment
variables (via etc/app.conf).  Nothing sensitive is hard-coded here.

``redact_mode`` is read here but never consulted by the redaction code
directly: routers receive a ``RedactionPolicy`` built from it through the
``get_redaction_policy`` dependency.
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings

# Project root is two levels up from this file  (backend/core/config.py → serdo/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    # Database – SQLite by default, any SQLAlchemy URL works
    database_url: str = f"sqlite:///{_PROJECT_ROOT / 'data' / 'serdo.db'}"

    # JWT signing secret – must be a long, random string
    secret_key: str

    # Token lifetime (1 week = 7 days * 24 hours * 60 minutes)
    access_token_expire_minutes: int = 10080

    # PBKDF2 work factor for account passwords
    password_hash_rounds: int = 600_000
    min_password_length: int = 6

    # When true, normal reads never carry secret plaintext; only has<Field>
    # presence flags.  Secrets are then only available through /reveal/*.
    redact_mode: bool = True

    # Write an audit row for every reveal call
    audit_reveals: bool = False

    cors_origins: List[str] = ["http://localhost:5173"]

    # app.conf lives in etc/ – resolved relative to the project root so that
    # the file is found regardless of the working directory.
    model_config = {"env_file": str(_PROJECT_ROOT / "etc" / "app.conf")}


# Module-level singleton – import this everywhere: from core.config import settings
settings = Settings()
