"""
HTTP client for the admin API.

Wraps a requests.Session with the bearer token, default headers and the
error taxonomy from spadmin.errors. There is no retry: one failed call
raises immediately and the caller decides what to show.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse

import requests

from . import endpoints
from .config import DEFAULT_TIMEOUT, Settings
from .errors import ApiError, NetworkError, error_from_status
from .logger import StructuredLogger, get_logger

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Expires": "0",
    "X-Requested-With": "XMLHttpRequest",
}


def resource_name(path: str) -> str:
    """First path segment, used to group metrics ("/spajobs/1" -> "spajobs")."""
    parts = [p for p in path.split("/") if p]
    return parts[0] if parts else "root"


def unwrap_records(body: Any, logger: Optional[StructuredLogger] = None) -> List[Dict[str, Any]]:
    """Return the record list from a bare list or a data/users envelope."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ("data", "users"):
            if isinstance(body.get(key), list):
                return body[key]
    (logger or get_logger()).warning("Response is not a record list", kind=type(body).__name__)
    return []


class ApiClient:
    """Authenticated JSON client for one API base URL."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        parsed = urlparse(base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("base_url must include scheme and host")
        if not timeout or timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or get_logger()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ApiClient":
        return cls(settings.api_url, token=settings.token, timeout=settings.timeout, **kwargs)

    def url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def headers(self) -> Dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Any = None,
    ) -> Any:
        """Send one request and return the decoded body.

        Raises:
            NetworkError: The request never completed
            AuthError, NotFoundError, ServerError: The API answered >= 400
        """
        resource = resource_name(path)
        url = self.url(path)
        self.logger.record_request(resource)
        self.logger.debug(f"{method} {path}", params=params)
        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=self.headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            self.logger.record_failure(resource, "Timeout")
            self.logger.warning("Request timed out", method=method, url=url)
            raise NetworkError()
        except requests.exceptions.RequestException as e:
            self.logger.record_failure(resource, "NetworkError")
            self.logger.error("Request error", method=method, url=url, error=str(e))
            raise NetworkError()

        body = self._decode(resp)
        if resp.status_code >= 400:
            err = error_from_status(resp.status_code, body)
            self.logger.record_failure(resource, f"HTTPError_{resp.status_code}")
            self.logger.error(
                "Request failed", method=method, url=url, status=resp.status_code, error=err.message
            )
            raise err
        return body

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Any = None) -> Any:
        return self.request("POST", path, payload=payload)

    def put(self, path: str, payload: Any = None) -> Any:
        return self.request("PUT", path, payload=payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def login(self, credentials: Dict[str, Any]) -> Any:
        """Log in as admin and keep the returned token for later calls.

        The token lives only on this client instance.
        """
        body = self.post(endpoints.ADMIN_LOGIN, credentials)
        token = None
        if isinstance(body, dict):
            token = body.get("token")
            data = body.get("data")
            if not token and isinstance(data, dict):
                token = data.get("token")
        if not token:
            raise ApiError("Login response did not include a token")
        self.token = token
        self.logger.info("Logged in", base_url=self.base_url)
        return body

    def fetch_all(self, paths: Sequence[str], max_workers: int = 4) -> List[Any]:
        """GET several paths concurrently.

        Results come back in the order of ``paths``. If any call fails the
        first failure (in that order) is raised and the group is discarded.
        """
        if not paths:
            return []
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(self.get, p) for p in paths]
            return [f.result() for f in futures]
