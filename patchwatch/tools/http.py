"""HTTP client abstraction for release catalog queries.

This module provides:
- HttpClient: Protocol for GET requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Canned responses per URL, for testing

A completed HTTP exchange is always ``Ok(HttpResponse)``, whatever its
status code; ``Err(HttpError)`` is reserved for requests that never produced
a response (connection refused, DNS, TLS, timeout) or whose response could not
be read as HTTP.
"""

from __future__ import annotations

import http.client
import json
import ssl
import threading
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from patchwatch.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpResponse",
    "HttpError",
    "RealHttpClient",
    "MockHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """A completed HTTP exchange.

    Attributes:
        url: The requested URL
        status: HTTP status code
        body: Raw response body
    """

    url: str
    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(frozen=True, slots=True)
class HttpError:
    """Transport failure: the request did not produce an HTTP response.

    Attributes:
        url: The URL that failed
        message: Human-readable error message
    """

    url: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET.

    Implementations must be safe to share between threads; update checks for
    several projects run concurrently on one client.
    """

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        """Fetch URL.

        Args:
            url: URL to fetch
            headers: Extra request headers

        Returns:
            Ok with the response (any status), or Err with HttpError
        """
        ...


class RealHttpClient:
    """HTTP client using urllib with the system certificate store.

    Stateless between calls, so one instance can serve concurrent requests.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Per-request timeout in seconds
        """
        self.timeout = timeout
        self._ssl_context = ssl.create_default_context()

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        try:
            req = urllib.request.Request(url, headers=dict(headers or {}))
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(HttpResponse(url=url, status=response.status, body=response.read()))
        except urllib.error.HTTPError as e:
            # 4xx/5xx still carry a response; the caller decides what they mean.
            try:
                body = e.read()
            except OSError:
                body = b""
            return Ok(HttpResponse(url=url, status=e.code, body=body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, message=str(e) or type(e).__name__))
        except http.client.HTTPException as e:
            # Malformed or truncated responses: BadStatusLine, IncompleteRead.
            return Err(HttpError(url=url, message=str(e) or type(e).__name__))


@dataclass(frozen=True, slots=True)
class RecordedCall:
    url: str
    headers: dict[str, str]


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_json("https://api.example.com/releases", [{"tag_name": "v1.0.0"}])
        client.set_status("https://api.example.com/other", 403)
        client.set_error("https://api.example.com/down", "Connection refused")

    Unknown URLs answer 404 with an empty body.
    """

    def __init__(self) -> None:
        self._responses: dict[str, HttpResponse | HttpError] = {}
        self._lock = threading.Lock()
        self.calls: list[RecordedCall] = []

    def set_response(self, url: str, status: int, body: bytes) -> None:
        self._responses[url] = HttpResponse(url=url, status=status, body=body)

    def set_json(self, url: str, data: object, status: int = 200) -> None:
        """Respond to URL with ``data`` serialized as JSON."""
        self.set_response(url, status, json.dumps(data).encode("utf-8"))

    def set_status(self, url: str, status: int) -> None:
        self.set_response(url, status, b"")

    def set_error(self, url: str, message: str) -> None:
        """Make requests to URL fail at the transport level."""
        self._responses[url] = HttpError(url=url, message=message)

    @property
    def urls(self) -> list[str]:
        """Requested URLs, in call order."""
        with self._lock:
            return [c.url for c in self.calls]

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        with self._lock:
            self.calls.append(RecordedCall(url=url, headers=dict(headers or {})))

        response = self._responses.get(url)
        if response is None:
            return Ok(HttpResponse(url=url, status=404))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
