# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Remote size probing.

RemoteResourceProbe resolves the byte size of a remote file with HEAD requests. It
follows redirects under a hop bound and stays inside one wait budget for the whole
chain. The result is a ProbeResult or one ProbeError subclass; the probe never retries.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass

from .config import HttpSettings, load_http_settings
from .errors import (
    ErrorCategory,
    InvalidLocation,
    MalformedSizeHeader,
    MissingSizeHeader,
    ProbeTimeout,
    RedirectLoop,
    TransportError,
    UnexpectedStatus,
)
from .http.client import HttpClient
from .http.models import HttpRequest, HttpResponse
from .http.url import is_absolute_http_url, resolve_redirect

logger = logging.getLogger(__name__)

_DIGITS_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ProbeResult:
    """Declared byte size of a remote resource."""

    size: int

    def __int__(self) -> int:
        return self.size


def parse_content_length(value: str, *, url: str | None = None) -> int:
    """Parse a Content-Length value as a base-10 non-negative integer."""
    raw = value.strip()
    if not _DIGITS_RE.fullmatch(raw):
        raise MalformedSizeHeader(f"Malformed Content-Length {value!r} in response from {url}", url=url, value=value)
    return int(raw)


class RemoteResourceProbe:
    """HEAD-based size probe over an injectable HttpClient."""

    def __init__(
        self,
        client: HttpClient,
        *,
        settings: HttpSettings | None = None,
        timeout: float | None = None,
        max_redirects: int | None = None,
    ):
        self.client = client
        self.settings = settings or load_http_settings()
        self.timeout = timeout if timeout is not None else self.settings.timeout
        self.max_redirects = max_redirects if max_redirects is not None else self.settings.max_redirects
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be >= 0")

    def probe(self, url: str) -> ProbeResult:
        if not is_absolute_http_url(url):
            raise InvalidLocation(f"Not an absolute http(s) URL: {url!r}", url=url if isinstance(url, str) else None)

        deadline = time.monotonic() + self.timeout
        chain = [url]
        current = url

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ProbeTimeout(f"HEAD {current} timed out after {self.timeout:g}s", url=current)

            logger.debug("HEAD %s (hop %d, %.2fs left)", current, len(chain) - 1, remaining)
            response = self.client.request(
                HttpRequest(url=current, method="HEAD", timeout=remaining, allow_redirects=False)
            )
            if not response.ok:
                raise self._transport_failure(current, response)

            status = response.status_code
            location = response.header("location")
            if response.is_redirect and location:
                if len(chain) - 1 >= self.max_redirects:
                    raise RedirectLoop(
                        f"HEAD {url} exceeded {self.max_redirects} redirects",
                        url=current,
                        chain=chain,
                    )
                target = resolve_redirect(current, location)
                if not is_absolute_http_url(target):
                    raise InvalidLocation(f"Redirect from {current} to unusable location {location!r}", url=target)
                logger.debug("%s redirected (%s) to %s", current, status, target)
                chain.append(target)
                current = target
                continue

            if status != 200:
                raise UnexpectedStatus(status if status is not None else 0, url=current)

            length = response.header("content-length", default="")
            if not length:
                raise MissingSizeHeader(f"No Content-Length header in response from {current}", url=current)

            size = parse_content_length(length, url=current)
            logger.info("Resolved %s to %d bytes after %d redirect(s)", url, size, len(chain) - 1)
            return ProbeResult(size)

    @staticmethod
    def _transport_failure(url: str, response: HttpResponse) -> Exception:
        category = response.error_category or ErrorCategory.UNKNOWN_ERROR
        message = response.error_message or "transport failure"
        if category == ErrorCategory.TIMEOUT:
            return ProbeTimeout(f"HEAD {url} timed out: {message}", url=url)
        if category == ErrorCategory.INVALID_INPUT:
            return InvalidLocation(f"HEAD {url} rejected: {message}", url=url)
        return TransportError(f"HEAD {url} failed: {message}", url=url, cause=category)


__all__ = ["ProbeResult", "RemoteResourceProbe", "parse_content_length"]
