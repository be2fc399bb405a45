# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header lookup utilities.

Header names are case-insensitive (RFC 9110), but responses are stored as plain dicts
whose key casing depends on the client that produced them.
"""

from __future__ import annotations

from collections.abc import Mapping


def header_value(headers: Mapping[object, object] | None, name: str, default: str = "") -> str:
    """Return a stripped header value using case-insensitive key matching."""
    if not headers or not name:
        return default

    lower = name.lower()
    for key in (name, lower, lower.title()):
        if key in headers:
            value = headers.get(key)
            return default if value is None else str(value).strip()

    for key, value in headers.items():
        if key is not None and str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


__all__ = ["header_value"]
