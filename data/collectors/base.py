"""Base collector: aiohttp session handling and HTTP status mapping."""

import re
import aiohttp
import structlog
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from config.constants import HTTP_TIMEOUT, USER_AGENT

log = structlog.get_logger(__name__)

# Patterns that look like credentials in URLs or error strings
_SENSITIVE_PARAMS = re.compile(
    r"((?:token|api_?key|secret|password|authorization)[=:]\s*)[^&\s'\")]+",
    re.IGNORECASE,
)


def sanitize_error(error: str) -> str:
    """Strip tokens and passwords from error messages."""
    return _SENSITIVE_PARAMS.sub(r"\1[REDACTED]", error)


class RemoteError(Exception):
    """A request to the server did not produce the expected payload."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        super().__init__(message)


class NotModifiedError(RemoteError):
    """HTTP 304: the resource matches the validator we sent."""


class AuthenticationError(RemoteError):
    """HTTP 401/403."""


class NotFoundError(RemoteError):
    """HTTP 404."""


class ConnectionFailedError(RemoteError):
    """The server could not be reached or timed out."""

    def __init__(self, message: str) -> None:
        super().__init__(0, message)


@dataclass(frozen=True)
class HttpResponse:
    status: int
    headers: dict[str, str] = field(default_factory=dict)  # lowercased names
    body: bytes = b""

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "").split(";")[0].strip().lower()


class BaseCollector(ABC):
    """Abstract base class for remote clients."""

    api_name: str = "unknown"

    def __init__(self) -> None:
        self._session: aiohttp.ClientSession | None = None

    def _auth(self) -> aiohttp.BasicAuth | None:
        return None

    def _default_headers(self) -> dict[str, str]:
        return {"User-Agent": USER_AGENT}

    async def get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=HTTP_TIMEOUT),
                headers=self._default_headers(),
                auth=self._auth(),
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: str | bytes | None = None,
    ) -> HttpResponse:
        """Make one HTTP request and map error statuses to RemoteError subclasses."""
        session = await self.get_session()
        try:
            async with session.request(method, url, params=params, headers=headers, data=data) as resp:
                body = await resp.read()
                response = HttpResponse(
                    status=resp.status,
                    headers={k.lower(): v for k, v in resp.headers.items()},
                    body=body,
                )
        except (aiohttp.ClientError, TimeoutError) as e:
            log.warning("request_failed", api=self.api_name, method=method, url=url, error=sanitize_error(str(e)))
            raise ConnectionFailedError(sanitize_error(f"{method} {url}: {e!r}")) from e

        self._raise_for_status(method, url, response)
        return response

    def _raise_for_status(self, method: str, url: str, response: HttpResponse) -> None:
        status = response.status
        if status == 304:
            raise NotModifiedError(status, f"HTTP 304 for {url}")
        if status in (401, 403):
            log.warning("authentication_failed", api=self.api_name, status=status, url=url)
            raise AuthenticationError(status, f"HTTP {status} for {method} {url}")
        if status == 404:
            raise NotFoundError(status, f"HTTP 404 for {url}")
        if status >= 400:
            log.warning("http_error", api=self.api_name, status=status, url=url)
            raise RemoteError(status, f"HTTP {status} for {method} {url}")

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the server is reachable."""
        ...
