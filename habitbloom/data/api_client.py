import os
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

_SECRET_GETTER = None


class RemoteError(RuntimeError):
    def __init__(self, status_code: int, detail: Any = None, reason: str = ""):
        self.status_code = status_code
        self.detail = detail
        self.reason = reason
        super().__init__(f"API error {status_code} {reason}: {detail}".strip())

    @property
    def message(self) -> str:
        if isinstance(self.detail, dict) and self.detail.get("detail"):
            return str(self.detail["detail"])
        if self.detail:
            return str(self.detail)
        return self.reason or "Request failed."


def _build_session():
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST", "PUT", "PATCH", "DELETE"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


_SESSION = _build_session()


def configure(secret_getter=None):
    global _SECRET_GETTER
    _SECRET_GETTER = secret_getter


def _get_secret(path, default=None):
    if _SECRET_GETTER is None:
        return default
    return _SECRET_GETTER(path, default)


def api_base_url():
    return (
        _get_secret(("app", "API_BASE_URL"))
        or _get_secret(("API_BASE_URL",))
        or os.getenv("API_BASE_URL")
        or ""
    )


def is_enabled():
    return bool(api_base_url())


def request(
    method: str,
    path: str,
    params: dict | None = None,
    json: dict | None = None,
    timeout: int = 10,
    authenticated: bool = True,
    token: str | None = None,
) -> Any:
    base = api_base_url().rstrip("/")
    if not base:
        raise RuntimeError("API_BASE_URL not configured")
    headers = {}
    if authenticated:
        if not token:
            raise RemoteError(401, "Not signed in", "Unauthorized")
        headers["Authorization"] = f"Bearer {token}"
    url = f"{base}{path}"
    response = _SESSION.request(method, url, params=params, json=json, headers=headers, timeout=timeout)
    if not response.ok:
        try:
            detail = response.json()
        except Exception:
            detail = response.text
        raise RemoteError(response.status_code, detail, response.reason or "")
    if response.status_code == 204:
        return None
    return response.json()
