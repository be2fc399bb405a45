# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable

import anyio
import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import ErrorCategory, categorize_exception
from .client import HttpClient
from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], httpx.AsyncBaseTransport]


class HttpxClient(HttpClient):
    """
    Blocking facade over httpx.AsyncClient.

    httpx timeouts bound each connect/read/write separately, so a peer that trickles bytes
    could hold a request open indefinitely. Each request therefore runs under
    anyio.fail_after(budget): when the budget expires the request is cancelled and the
    stream and connection are closed on the way out of their context managers.
    """

    def __init__(self, settings: HttpSettings | None = None, transport_factory: TransportFactory | None = None):
        self.settings = settings or load_http_settings()
        self._transport_factory = transport_factory

    def request(self, request: HttpRequest) -> HttpResponse:
        return anyio.run(self._request, request)

    def _open_client(self, timeout: float) -> httpx.AsyncClient:
        transport = self._transport_factory() if self._transport_factory is not None else None
        return httpx.AsyncClient(
            transport=transport,
            follow_redirects=False,
            timeout=timeout,
            verify=self.settings.verify_ssl,
        )

    async def _request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)
        budget = request.timeout if request.timeout is not None else self.settings.timeout
        max_body_bytes = self.settings.max_body_bytes

        try:
            with anyio.fail_after(budget):
                async with self._open_client(budget) as client:
                    async with client.stream(
                        request.method,
                        request.url,
                        headers=headers,
                        params=request.params,
                        follow_redirects=request.allow_redirects,
                    ) as resp:
                        content = bytearray()
                        truncated = False
                        if request.method.upper() != "HEAD":
                            async for chunk in resp.aiter_bytes():
                                if not chunk:
                                    continue
                                remaining = max_body_bytes - len(content)
                                if len(chunk) > remaining:
                                    content.extend(chunk[:remaining])
                                    truncated = True
                                    break
                                content.extend(chunk)

                        encoding = resp.encoding or "utf-8"
                        try:
                            text = bytes(content).decode(encoding, errors="replace")
                        except LookupError:
                            text = bytes(content).decode("utf-8", errors="replace")

            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                headers=dict(resp.headers),
                text=text,
                url=str(resp.url),
                meta={
                    "body_truncated": truncated,
                    "body_bytes_read": len(content),
                },
            )
        except TimeoutError:
            logger.debug("%s %s exceeded its %.2fs budget", request.method, request.url, budget)
            return HttpResponse(
                ok=False,
                url=request.url,
                error_message=f"{request.method} {request.url} exceeded {budget:g}s deadline",
                error_type="TimeoutError",
                error_category=ErrorCategory.TIMEOUT,
            )
        except Exception as exc:  # noqa: BLE001
            category = categorize_exception(exc)
            logger.debug("%s %s failed (%s): %s", request.method, request.url, category.value, exc)
            return HttpResponse(
                ok=False,
                url=request.url,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                error_category=category,
            )

    def close(self) -> None:
        # Connections live only as long as one request; nothing is pooled between calls.
        return None
