# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process HttpClient implementations."""

from __future__ import annotations

from collections.abc import Callable

from .client import HttpClient
from .models import HttpRequest, HttpResponse

Responder = HttpResponse | Callable[[HttpRequest], HttpResponse]


class StubHttpClient(HttpClient):
    """Deterministic, programmable HttpClient for tests and dry runs."""

    def __init__(self, responses: dict[str, Responder] | None = None):
        self._responses: dict[str, Responder] = dict(responses or {})
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: Responder) -> None:
        self._responses[url] = response

    def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        responder = self._responses.get(request.url)
        if responder is None:
            return HttpResponse(ok=False, status_code=None, url=request.url, error_message="No stubbed response configured")
        if callable(responder):
            return responder(request)
        return responder

    def close(self) -> None:
        self.closed = True
