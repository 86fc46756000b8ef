# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for servers and providers."""

from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from core.redaction import SecretField
from core.schemas import WireModel


VALID_STATUSES = {"running", "stopped", "expired", "maintenance"}
VALID_CATEGORIES = {"server", "domain"}
VALID_PAYMENT_METHODS = {"CreditCard", "PayPal", "Alipay", "WeChat", "Other"}

# -- Secret catalogues -----------------------------------------------------
# Wire names for the redaction policy, attribute names for the merge rule.

SERVER_SECRETS = (
    SecretField("password", "hasPassword"),
    SecretField("sshPassword", "hasSshPassword"),
    SecretField("providerPassword", "hasProviderPassword"),
)
SERVER_SECRET_ATTRS = ("password", "ssh_password", "provider_password")

PROVIDER_SECRETS = (SecretField("password", "hasPassword"),)
PROVIDER_SECRET_ATTRS = ("password",)


# -- Requests --------------------------------------------------------------
# Secret fields accept the merge-rule vocabulary: "__KEEP__", "" or a new
# value.  Leaving a secret key out of an update behaves like "__KEEP__".


class ServerCreate(WireModel):
    name: str
    ip: str = ""
    provider: str = ""
    provider_id: Optional[int] = None
    region: str = ""
    os: str = ""
    status: str = "running"
    expiration_date: str = ""
    panel_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    notes: Optional[str] = None
    provider_url: Optional[str] = None
    provider_username: Optional[str] = None
    provider_password: Optional[str] = None
    ssh_port: Optional[int] = None
    ssh_username: Optional[str] = None
    ssh_password: Optional[str] = None
    sort_order: Optional[int] = None


class ServerUpdate(WireModel):
    name: Optional[str] = None
    ip: Optional[str] = None
    provider: Optional[str] = None
    provider_id: Optional[int] = None
    region: Optional[str] = None
    os: Optional[str] = None
    status: Optional[str] = None
    expiration_date: Optional[str] = None
    panel_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    notes: Optional[str] = None
    provider_url: Optional[str] = None
    provider_username: Optional[str] = None
    provider_password: Optional[str] = None
    ssh_port: Optional[int] = None
    ssh_username: Optional[str] = None
    ssh_password: Optional[str] = None
    sort_order: Optional[int] = None


class ProviderCreate(WireModel):
    name: str
    login_url: str = ""
    username: str = ""
    password: Optional[str] = None
    categories: List[str] = []
    payment_method: str = "Other"
    payment_account: str = ""
    sort_order: Optional[int] = None


class ProviderUpdate(WireModel):
    name: Optional[str] = None
    login_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    categories: Optional[List[str]] = None
    payment_method: Optional[str] = None
    payment_account: Optional[str] = None
    sort_order: Optional[int] = None


# -- Records ---------------------------------------------------------------
# Full serialisations *including* secrets.  Never returned as-is: routers
# dump them and hand the dict to the redaction policy.


class ServerRecord(WireModel):
    id: int
    name: str
    ip: str
    provider: str
    provider_id: Optional[int] = None
    region: str
    os: str
    status: str
    expiration_date: str
    panel_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    notes: Optional[str] = None
    provider_url: Optional[str] = None
    provider_username: Optional[str] = None
    provider_password: Optional[str] = None
    ssh_port: Optional[int] = None
    ssh_username: Optional[str] = None
    ssh_password: Optional[str] = None
    sort_order: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ProviderRecord(WireModel):
    id: int
    name: str
    login_url: str
    username: str
    password: Optional[str] = None
    categories: List[str]
    payment_method: str
    payment_account: str
    sort_order: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("categories", mode="before")
    @classmethod
    def _split_categories(cls, v):
        if isinstance(v, str):
            return [c for c in v.split(",") if c]
        return v
