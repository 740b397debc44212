"""Fetch link targets over HTTP and stream them into a sink."""

import asyncio
import io
import time
from typing import BinaryIO

import httpx

DEFAULT_TIMEOUT = 30.0


class FetchError(Exception):
    """Raised when a request fails, returns non-200, or runs out of time."""


class Deadline:
    """Overall time limit shared by every request of one run."""

    def __init__(self, seconds: float):
        """Start the clock.

        Args:
            seconds: Time allowed for the whole run
        """
        self.seconds = seconds
        self.expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        """Seconds left before expiry (never negative)."""
        return max(0.0, self.expires_at - time.monotonic())

    def check(self, url: str) -> None:
        """Raise if the deadline has passed.

        Args:
            url: URL being fetched (for error message)

        Raises:
            FetchError: If no time is left
        """
        if self.remaining() <= 0:
            raise FetchError(f"Deadline of {self.seconds:g}s exceeded while fetching {url}")


def resolve_target(base: str, href: str) -> str:
    """Resolve an href against the base URL.

    Absolute http(s) hrefs pass through. Relative ones are appended to the
    base with exactly one '/' between them.

    Args:
        base: Base URL (may be empty)
        href: Raw href value

    Returns:
        URL to request
    """
    if not base or href.startswith(("http://", "https://")):
        return href
    if base.endswith("/"):
        return base + href
    return base + "/" + href


async def fetch_to(
    client: httpx.AsyncClient,
    base: str,
    href: str,
    sink: BinaryIO,
    deadline: Deadline | None = None,
) -> int:
    """GET a target and stream its body into sink.

    With a deadline, the whole request (headers and body) must finish in the
    time left; a server that stalls mid-body is cut off when it runs out.

    Args:
        client: HTTP client to send the request with
        base: Base URL for relative hrefs ("" for none)
        href: Target href
        sink: Binary writable the body is copied into
        deadline: Optional run deadline bounding the request

    Returns:
        Number of bytes written

    Raises:
        FetchError: On transport failure, non-200 status, or expired deadline
        OSError: If writing to sink fails
    """
    url = resolve_target(base, href)
    timeout = DEFAULT_TIMEOUT
    if deadline is not None:
        deadline.check(url)
        timeout = deadline.remaining()

    try:
        return await asyncio.wait_for(_stream_into(client, url, sink, timeout), timeout)
    except asyncio.TimeoutError as e:
        raise FetchError(f"Deadline of {timeout:.3g}s exceeded while fetching {url}") from e
    except httpx.RequestError as e:
        raise FetchError(f"Request failed for {url}: {e}") from e


async def _stream_into(client: httpx.AsyncClient, url: str, sink: BinaryIO, timeout: float) -> int:
    written = 0
    async with client.stream("GET", url, timeout=timeout) as response:
        if response.status_code != 200:
            raise FetchError(f"Failed to get {url!r}: HTTP {response.status_code} {response.reason_phrase}")
        async for chunk in response.aiter_bytes():
            sink.write(chunk)
            written += len(chunk)
    return written


async def fetch_bytes(client: httpx.AsyncClient, url: str, deadline: Deadline | None = None) -> bytes:
    """Fetch a URL fully into memory.

    Args:
        client: HTTP client
        url: Absolute URL
        deadline: Optional run deadline

    Returns:
        Response body

    Raises:
        FetchError: If the fetch fails
    """
    buffer = io.BytesIO()
    await fetch_to(client, "", url, buffer, deadline)
    return buffer.getvalue()
