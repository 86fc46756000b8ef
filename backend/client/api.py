# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
HTTP client for the Serdo API.

Wraps an ``httpx.Client`` (FastAPI's ``TestClient`` works too) and owns the
client half of the reveal protocol: it attaches the session key to reveal
calls, opens the returned envelopes locally and keeps revealed values in a
``RevealCache``.  ``logout`` destroys the session key, so envelopes fetched
before it can no longer be opened.

    http = httpx.Client(base_url="http://localhost:8000")
    api = InventoryClient(http)
    api.login("alice", "s3cret!")
    api.reveal_server_secrets(7)   # {"panelPassword": "...", ...}
"""

from typing import Any, Callable, Dict, Hashable, Optional

import httpx

from client.cache import RevealCache
from client.errors import ApiError, NotFound, Unauthorized
from client.session_keys import SessionKeyStore
from core.codec import Envelope, decode_session_key, decrypt

# Server record field -> key in the /reveal/servers/{id} body
SERVER_REVEAL_KEYS = {
    "password": "panelPassword",
    "sshPassword": "sshPassword",
    "providerPassword": "providerPassword",
}

class InventoryClient:
    def __init__(
        self,
        http: httpx.Client,
        key_store: Optional[SessionKeyStore] = None,
        cache: Optional[RevealCache] = None,
    ):
        self._http = http
        self.key_store = key_store if key_store is not None else SessionKeyStore()
        self.cache = cache if cache is not None else RevealCache()
        self.token: Optional[str] = None

    # -- plumbing ----------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, json: Any = None, headers: Optional[dict] = None) -> Any:
        resp = self._http.request(method, path, json=json, headers={**self._headers(), **(headers or {})})
        if resp.status_code >= 400:
            code = _error_code(resp)
            if resp.status_code == 401:
                raise Unauthorized(resp.status_code, code)
            if resp.status_code == 404:
                raise NotFound(resp.status_code, code)
            raise ApiError(resp.status_code, code)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def _reveal(self, path: str) -> Dict[str, Optional[str]]:
        """
        GET a reveal endpoint and open every envelope in the body.

        The key is read once so the same key is used to send and to decrypt,
        even if a logout happens while the request is in flight.
        """
        key_b64 = self.key_store.get_or_create()
        body = self._request("GET", path, headers={"x-reveal-key": key_b64}) or {}
        key = decode_session_key(key_b64)
        return {
            name: decrypt(key, Envelope.model_validate(env))
            for name, env in body.items()
            if env
        }

    # -- account -----------------------------------------------------------

    def register(self, username: str, email: str, password: str) -> dict:
        body = self._request("POST", "/auth/register", {"username": username, "email": email, "password": password})
        self.token = body["token"]
        return body["user"]

    def login(self, username: str, password: str) -> dict:
        body = self._request("POST", "/auth/login", {"username": username, "password": password})
        self.token = body["token"]
        return body["user"]

    def logout(self) -> None:
        self.token = None
        self.key_store.destroy()
        self.cache.clear()

    def snapshot(self) -> dict:
        return self._request("GET", "/me")

    # -- records -----------------------------------------------------------

    def list_servers(self) -> list:
        return self._request("GET", "/servers")

    def get_server(self, server_id: int) -> dict:
        return self._request("GET", f"/servers/{server_id}")

    def create_server(self, data: dict) -> dict:
        return self._request("POST", "/servers", data)

    def update_server(self, server_id: int, data: dict) -> dict:
        return self._request("PUT", f"/servers/{server_id}", data)

    def delete_server(self, server_id: int) -> None:
        self._request("DELETE", f"/servers/{server_id}")

    def list_providers(self) -> list:
        return self._request("GET", "/providers")

    def get_provider(self, provider_id: int) -> dict:
        return self._request("GET", f"/providers/{provider_id}")

    def create_provider(self, data: dict) -> dict:
        return self._request("POST", "/providers", data)

    def update_provider(self, provider_id: int, data: dict) -> dict:
        return self._request("PUT", f"/providers/{provider_id}", data)

    def delete_provider(self, provider_id: int) -> None:
        self._request("DELETE", f"/providers/{provider_id}")

    def get_settings(self) -> dict:
        return self._request("GET", "/settings")

    def update_settings(self, data: dict) -> dict:
        return self._request("PUT", "/settings", data)

    # -- reveal ------------------------------------------------------------

    def reveal_server_secrets(self, server_id: int) -> Dict[str, str]:
        """Only the secrets that are set appear in the result."""
        return self._reveal(f"/reveal/servers/{server_id}")

    def reveal_provider_password(self, provider_id: int) -> Optional[str]:
        return self._reveal(f"/reveal/providers/{provider_id}").get("password")

    def reveal_whois_api_key(self) -> Optional[str]:
        return self._reveal("/reveal/settings/key").get("whoisApiKey")

    def reveal_bark_key(self) -> Optional[str]:
        return self._reveal("/reveal/settings/bark-key").get("barkKey")

    def reveal_smtp_password(self) -> Optional[str]:
        return self._reveal("/reveal/settings/smtp-password").get("smtpPassword")

    def start_reveal_session(self, current_password: str) -> None:
        """Step-up: have the server mint the session key after a password check."""
        body = self._request("POST", "/reveal/session", {"currentPassword": current_password})
        self.key_store.adopt(body["key"])
        self.cache.clear()

    def _reveal_record(self, kind: str, record_id: Hashable, field: str) -> Dict[str, Optional[str]]:
        if kind == "server":
            revealed = self.reveal_server_secrets(record_id)
            return {name: revealed.get(body) for name, body in SERVER_REVEAL_KEYS.items()}
        if kind == "provider":
            return {"password": self.reveal_provider_password(record_id)}
        if kind == "settings":
            fetch = {
                "whoisApiKey": self.reveal_whois_api_key,
                "barkKey": self.reveal_bark_key,
                "smtpPassword": self.reveal_smtp_password,
            }[field]
            return {field: fetch()}
        raise ValueError(f"unknown record kind: {kind}")

    def revealer(self, kind: str, record_id: Hashable, field: str) -> Callable[[], Optional[str]]:
        """
        A fetch function for ``SecretView``.  *field* is the record's own
        field name (``password``, ``sshPassword`` ...), the same name its
        ``has*`` flag is derived from.  Answers from the cache when it can;
        results for a record the user has navigated away from are dropped
        rather than cached.
        """
        def fetch() -> Optional[str]:
            cached = self.cache.get(kind, record_id, field)
            if cached is not None:
                return cached
            ticket = self.cache.ticket(kind, record_id)
            values = self._reveal_record(kind, record_id, field)
            for name, value in values.items():
                if value is not None:
                    self.cache.put(ticket, name, value)
            return values.get(field)

        return fetch


def _error_code(resp: httpx.Response) -> str:
    try:
        detail = resp.json().get("detail")
    except (ValueError, AttributeError):
        return "error"
    return detail if isinstance(detail, str) else "invalid"
