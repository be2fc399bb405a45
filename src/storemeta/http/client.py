# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport seam shared by the size probe and the build lookup."""

from typing import Protocol, runtime_checkable

from ..config import HttpSettings, load_http_settings
from .models import HttpRequest, HttpResponse


@runtime_checkable
class HttpClient(Protocol):
    """Send one request; transport failures come back as HttpResponse(ok=False), never as exceptions."""

    def request(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None:  # pragma: no cover - optional for stubs
        ...


def create_default_http_client(settings: HttpSettings | None = None) -> HttpClient:
    """Build the httpx-backed client; redirects are only followed when a request asks for it."""
    from .httpx_client import HttpxClient

    return HttpxClient(settings or load_http_settings())
