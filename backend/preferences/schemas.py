# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Versioned settings document and its partial-update payload.

The document is the whole per-user settings blob (WHOIS API access and
notification channels).  Every field is spelled out; updates that carry
unknown keys are rejected instead of being merged in blindly.
"""

from typing import Literal, Optional

from pydantic import ConfigDict, Field

from core.redaction import SecretField
from core.schemas import WireModel

SCHEMA_VERSION = 1

SETTINGS_SECRETS = (
    SecretField("whoisApiKey", "hasWhoisApiKey"),
    SecretField("key", "hasKey", ("notifications", "bark")),
    SecretField("password", "hasPassword", ("notifications", "smtp")),
)
# Dotted attribute paths of the same secrets, for the merge rule
SETTINGS_SECRET_PATHS = {
    "whois_api_key",
    "notifications.bark.key",
    "notifications.smtp.password",
}


# -- Document --------------------------------------------------------------


class BarkConfig(WireModel):
    enabled: bool = False
    server_url: str = "https://api.day.app"
    key: str = ""


class SmtpConfig(WireModel):
    enabled: bool = False
    host: str = "smtp.gmail.com"
    port: int = 587
    username: str = ""
    password: str = ""
    from_email: str = ""


class NotificationPreferences(WireModel):
    notify_server_down: bool = True
    notify_domain_expiring: bool = True


class NotificationSettings(WireModel):
    bark: BarkConfig = Field(default_factory=BarkConfig)
    smtp: SmtpConfig = Field(default_factory=SmtpConfig)
    preferences: NotificationPreferences = Field(default_factory=NotificationPreferences)


class UserSettingsDocument(WireModel):
    schema_version: Literal[1] = SCHEMA_VERSION
    whois_api_base_url: str = ""
    whois_api_key: str = ""
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)


# -- Update payload --------------------------------------------------------
# Same shape, every field optional.  Secret fields take "__KEEP__", "" or a
# new value; an omitted secret is kept.


class _Update(WireModel):
    model_config = ConfigDict(extra="forbid")


class BarkUpdate(_Update):
    enabled: Optional[bool] = None
    server_url: Optional[str] = None
    key: Optional[str] = None


class SmtpUpdate(_Update):
    enabled: Optional[bool] = None
    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    from_email: Optional[str] = None


class PreferencesUpdate(_Update):
    notify_server_down: Optional[bool] = None
    notify_domain_expiring: Optional[bool] = None


class NotificationsUpdate(_Update):
    bark: Optional[BarkUpdate] = None
    smtp: Optional[SmtpUpdate] = None
    preferences: Optional[PreferencesUpdate] = None


class SettingsUpdate(_Update):
    whois_api_base_url: Optional[str] = None
    whois_api_key: Optional[str] = None
    notifications: Optional[NotificationsUpdate] = None
