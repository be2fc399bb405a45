# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared by the probe and the manifest glue."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

ALLOWED_SCHEMES = frozenset({"http", "https"})

_GITHUB_PREFIX = "https://github.com/"
_RAW_PREFIX = "https://raw.githubusercontent.com/"
_RAW_HEADS_SEGMENT = "/raw/refs/heads/"


def is_absolute_http_url(value: object) -> bool:
    """Return True for an absolute http(s) URL with a host."""
    if not isinstance(value, str) or not value.strip() or value != value.strip():
        return False
    try:
        parts = urlsplit(value)
        hostname = parts.hostname
    except ValueError:
        return False
    return parts.scheme.lower() in ALLOWED_SCHEMES and bool(hostname)


def resolve_redirect(current_url: str, location: str) -> str:
    """Resolve a Location header (absolute or relative) against the URL that returned it."""
    return urljoin(current_url, location.strip())


def to_raw_github_url(url: str) -> str:
    """
    Rewrite a github.com "raw/refs/heads" link to its raw.githubusercontent.com form.

    Example:
      https://github.com/o/r/raw/refs/heads/main/app.ipa
        -> https://raw.githubusercontent.com/o/r/main/app.ipa

    Other URLs are returned unchanged.
    """
    if "github.com" not in url or _RAW_HEADS_SEGMENT not in url:
        return url
    return url.replace(_GITHUB_PREFIX, _RAW_PREFIX, 1).replace(_RAW_HEADS_SEGMENT, "/", 1)


__all__ = ["ALLOWED_SCHEMES", "is_absolute_http_url", "resolve_redirect", "to_raw_github_url"]
