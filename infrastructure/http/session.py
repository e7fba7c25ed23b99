# infrastructure/http/session.py
from __future__ import annotations

from typing import Any, Optional, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from shared.version import PRODUCT_NAME, __version__


class HttpClient(Protocol):
    """Transport used by the service adapters (``requests.Session`` fits)."""

    def prepare_request(self, request: requests.Request) -> requests.PreparedRequest: ...

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response: ...


class RequestFactory(Protocol):
    def __call__(self, method: str, url: str) -> requests.Request: ...


def create_request(method: str, url: str) -> requests.Request:
    """Default request factory."""
    return requests.Request(method=method.upper(), url=url)


def build_user_agent(service: str, product: str = PRODUCT_NAME, existing: Optional[str] = None) -> str:
    """Compose the adapter's User-Agent, keeping any value already present."""

    agent = f"{product}/{__version__} ({service})"
    existing = (existing or "").strip()
    if existing and agent not in existing:
        return f"{agent} {existing}"
    return existing or agent


def _wrap_with_timeout(send_func, default_timeout: float):
    def wrapped(request, **kwargs):
        # Session.request forwards timeout=None explicitly
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = default_timeout
        return send_func(request, **kwargs)

    return wrapped


def build_session(
    user_agent: Optional[str] = None,
    *,
    retries: int = 2,
    backoff: float = 0.3,
    timeout: float = 15.0,
) -> requests.Session:
    s = requests.Session()
    if user_agent:
        s.headers.update({"User-Agent": user_agent})

    retry = Retry(
        total=retries,
        backoff_factor=backoff,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["HEAD", "GET", "OPTIONS"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("https://", adapter)
    s.mount("http://", adapter)

    # default timeout for every send, including Session.request
    s.send = _wrap_with_timeout(s.send, timeout)  # type: ignore[method-assign]
    return s


__all__ = ["HttpClient", "RequestFactory", "create_request", "build_user_agent", "build_session"]
