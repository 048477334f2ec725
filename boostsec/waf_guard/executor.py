"""HTTP executor issuing the request of a single test."""

import asyncio
import logging
import re
import time
from collections.abc import Iterable
from types import TracebackType
from urllib.parse import urljoin, urlsplit

import aiohttp
from yarl import URL

from boostsec.waf_guard.errors import InvalidAddressError, TransportError
from boostsec.waf_guard.models.outcome import ResponseSnapshot
from boostsec.waf_guard.models.suite_definition import DEFAULT_TIMEOUT, RequestSpec

_Exchange = tuple[int, dict[str, str], str]

_UNSAFE_TARGET_CHARS = re.compile(r"[\x00-\x20\x7f]")


def request_target(url: str) -> URL:
    """Wrap a resolved URL so it is sent without re-quoting or normalization.

    Existing percent escapes and dot segments reach the server as written.
    Only whitespace and control characters, which can't appear in a request
    line, are percent-encoded.
    """
    escaped = _UNSAFE_TARGET_CHARS.sub(lambda m: f"%{ord(m.group()):02X}", url)
    return URL(escaped, encoded=True)


def build_url(base_url: str, path: str) -> str:
    """Resolve a request path against the target base URL.

    Absolute paths replace the base path, relative paths are appended to its
    last directory, as in RFC 3986 reference resolution.

    Raises:
        InvalidAddressError: If either part can't be parsed or the result
            is not an absolute http(s) URL

    """
    try:
        urlsplit(base_url)
        urlsplit(path)
        url = urljoin(base_url, path)
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidAddressError(f"failed to build URL: {e}") from e

    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise InvalidAddressError(
            f"failed to build URL: {url!r} is not an absolute http(s) URL"
        )
    return url


def canonical_header_key(key: str) -> str:
    """Canonical header name, e.g. ``content-type`` -> ``Content-Type``."""
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


def normalize_headers(items: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Fold header pairs into a map, joining repeated names with ``", "``."""
    grouped: dict[str, list[str]] = {}
    for key, value in items:
        grouped.setdefault(canonical_header_key(key), []).append(value)
    return {key: ", ".join(values) for key, values in grouped.items()}


class HttpExecutor:
    """Executes test requests over one shared aiohttp session."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize executor, optionally around an existing session."""
        self._session = session
        self._owns_session = session is None
        self.logger = logger or logging.getLogger(__name__)

    async def __aenter__(self) -> "HttpExecutor":
        """Open the session if the executor owns it."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the owned session."""
        await self.close()

    async def close(self) -> None:
        """Close the session if the executor created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def execute(
        self,
        request: RequestSpec,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        test_name: str = "",
        cancel_event: asyncio.Event | None = None,
    ) -> ResponseSnapshot:
        """Perform one request and return the normalized response.

        Args:
            request: Request description of the test
            base_url: Target base URL the path is resolved against
            timeout: Deadline in seconds for the whole exchange
            test_name: Test name used in log events
            cancel_event: Fails the request promptly once set

        Returns:
            Snapshot of status, headers, body and elapsed time

        Raises:
            InvalidAddressError: If the URL can't be built
            TransportError: If no complete response was received

        """
        self.logger.info(
            "Executing test",
            extra={
                "test_name": test_name,
                "method": request.method,
                "path": request.path,
            },
        )

        url = build_url(base_url, request.path)
        if cancel_event is not None and cancel_event.is_set():
            raise TransportError(f"request cancelled: {request.method} {url}")

        start = time.perf_counter()
        status_code, headers, body = await self._exchange_unless_cancelled(
            request, url, timeout or DEFAULT_TIMEOUT, cancel_event
        )
        duration = time.perf_counter() - start

        self.logger.info(
            "Test executed",
            extra={
                "test_name": test_name,
                "status_code": status_code,
                "duration": round(duration, 6),
            },
        )

        return ResponseSnapshot(
            status_code=status_code,
            headers=headers,
            body=body,
            duration=duration,
        )

    async def _exchange_unless_cancelled(
        self,
        request: RequestSpec,
        url: str,
        timeout: float,
        cancel_event: asyncio.Event | None,
    ) -> _Exchange:
        """Run the exchange, abandoning it when the cancel event fires first."""
        if cancel_event is None:
            return await self._exchange(request, url, timeout)

        request_task = asyncio.ensure_future(self._exchange(request, url, timeout))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait(
                {request_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancel_task.cancel()
            if not request_task.done():
                request_task.cancel()
                await asyncio.gather(request_task, return_exceptions=True)

        if request_task.cancelled():
            raise TransportError(f"request cancelled: {request.method} {url}")
        return request_task.result()

    async def _exchange(
        self, request: RequestSpec, url: str, timeout: float
    ) -> _Exchange:
        """Send the request and read the whole body."""
        session = self._require_session()
        data = request.body.encode("utf-8") if request.body else None

        try:
            async with session.request(
                request.method,
                request_target(url),
                headers=request.headers,
                data=data,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                body = await response.text(errors="replace")
                return (
                    response.status,
                    normalize_headers(response.headers.items()),
                    body,
                )
        except TimeoutError as e:
            raise TransportError(
                f"request timed out after {timeout}s: {request.method} {url}"
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                f"failed to execute request {request.method} {url}: {e}"
            ) from e
        except ValueError as e:
            raise TransportError(
                f"failed to send request {request.method} {url}: {e}"
            ) from e

    def _require_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("HttpExecutor used outside of 'async with'")
        return self._session
