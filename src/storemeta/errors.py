# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    REDIRECT_LOOP = "REDIRECT_LOOP"
    HTTP_STATUS = "HTTP_STATUS"
    BAD_RESPONSE = "BAD_RESPONSE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


def _chain(exc: BaseException) -> list[BaseException]:
    seen: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in seen:
        seen.append(current)
        current = current.__cause__ or current.__context__
    return seen


def categorize_exception(exc: Exception) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    httpx wraps socket/ssl failures, so the cause chain is inspected before falling back
    to the coarse httpx transport classes.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    for item in _chain(exc):
        if isinstance(item, (ssl_module.SSLError, ssl_module.CertificateError)):
            return ErrorCategory.SSL_ERROR
        if isinstance(item, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR
        if isinstance(item, (TimeoutError, socket.timeout)):
            return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.UnsupportedProtocol, httpx.InvalidURL)):
        return ErrorCategory.INVALID_INPUT

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.INVALID_INPUT: "Invalid resource location",
        ErrorCategory.REDIRECT_LOOP: "Too many redirects",
        ErrorCategory.HTTP_STATUS: "Unexpected HTTP status",
        ErrorCategory.BAD_RESPONSE: "Unusable response headers",
        ErrorCategory.UNKNOWN_ERROR: "Network error",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


class StoremetaError(Exception):
    """Base class for every error surfaced by storemeta."""


class ProbeError(StoremetaError):
    """A remote size probe failed; carries the URL being probed and a category."""

    category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR

    def __init__(self, message: str, *, url: str | None = None):
        super().__init__(message)
        self.url = url

    @property
    def reason(self) -> str:
        return error_category_to_reason(self.category)


class InvalidLocation(ProbeError):
    category = ErrorCategory.INVALID_INPUT


class TransportError(ProbeError):
    """Connection-level failure (DNS, refused, TLS, protocol)."""

    def __init__(self, message: str, *, url: str | None = None, cause: ErrorCategory = ErrorCategory.UNKNOWN_ERROR):
        super().__init__(message, url=url)
        self.cause = cause
        self.category = cause


class ProbeTimeout(ProbeError):
    category = ErrorCategory.TIMEOUT


class RedirectLoop(ProbeError):
    category = ErrorCategory.REDIRECT_LOOP

    def __init__(self, message: str, *, url: str | None = None, chain: list[str] | None = None):
        super().__init__(message, url=url)
        self.chain = list(chain or [])


class UnexpectedStatus(ProbeError):
    category = ErrorCategory.HTTP_STATUS

    def __init__(self, status_code: int, *, url: str | None = None):
        super().__init__(f"Failed to HEAD {url}: {status_code}", url=url)
        self.status_code = status_code


class MissingSizeHeader(ProbeError):
    category = ErrorCategory.BAD_RESPONSE


class MalformedSizeHeader(ProbeError):
    category = ErrorCategory.BAD_RESPONSE

    def __init__(self, message: str, *, url: str | None = None, value: str = ""):
        super().__init__(message, url=url)
        self.value = value


class BuildLookupError(StoremetaError):
    """The latest CI build timestamp could not be determined."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ManifestError(StoremetaError):
    """The manifest could not be read, understood or written."""


__all__ = [
    "BuildLookupError",
    "ErrorCategory",
    "InvalidLocation",
    "MalformedSizeHeader",
    "ManifestError",
    "MissingSizeHeader",
    "ProbeError",
    "ProbeTimeout",
    "RedirectLoop",
    "StoremetaError",
    "TransportError",
    "UnexpectedStatus",
    "categorize_exception",
    "error_category_to_reason",
]
