# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Pydantic models for the reveal endpoints.

Every secret is optional: a field that has no stored secret is left out of
the response body entirely (the routes use ``response_model_exclude_none``).
"""

from typing import Optional

from core.codec import Envelope
from core.schemas import WireModel


class ServerSecretsResponse(WireModel):
    panel_password: Optional[Envelope] = None
    ssh_password: Optional[Envelope] = None
    provider_password: Optional[Envelope] = None


class ProviderSecretResponse(WireModel):
    password: Optional[Envelope] = None


class WhoisKeyResponse(WireModel):
    whois_api_key: Optional[Envelope] = None


class BarkKeyResponse(WireModel):
    bark_key: Optional[Envelope] = None


class SmtpPasswordResponse(WireModel):
    smtp_password: Optional[Envelope] = None


class RevealSessionRequest(WireModel):
    current_password: str


class RevealSessionResponse(WireModel):
    key: str
