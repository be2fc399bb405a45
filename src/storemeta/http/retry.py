# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Retry helper for HttpClient implementations."""

from __future__ import annotations

import logging
import time

from ..config import load_http_settings
from .client import HttpClient
from .models import HttpRequest, HttpResponse, RetryConfig

logger = logging.getLogger(__name__)


def build_default_retry_config() -> RetryConfig:
    """Create a RetryConfig from environment-backed HttpSettings."""
    return RetryConfig.from_settings(load_http_settings())


def send_with_retries(
    client: HttpClient,
    request: HttpRequest,
    *,
    retry_config: RetryConfig | None = None,
) -> HttpResponse:
    """
    Execute a request with basic retry/backoff semantics.

    Only transport-level failures (no status code) are retried; an HTTP response of any
    status is returned to the caller as-is.
    """
    cfg = retry_config or build_default_retry_config()

    attempt = 0
    delay = cfg.initial_delay
    last_response: HttpResponse | None = None

    while attempt < cfg.max_attempts:
        response = client.request(request)
        last_response = response

        if response.ok or response.status_code is not None:
            if attempt:
                response.meta["retry_count"] = attempt
            return response

        attempt += 1
        if attempt >= cfg.max_attempts:
            break
        logger.info(
            "%s %s failed (%s); retrying in %.1fs [%d/%d]",
            request.method,
            request.url,
            response.error_message,
            delay,
            attempt,
            cfg.max_attempts - 1,
        )
        time.sleep(delay)
        delay *= cfg.backoff_factor

    if last_response is None:
        return HttpResponse(ok=False, url=request.url, error_message="No attempts made", meta={"retry_count": 0})
    last_response.meta.setdefault("retry_count", attempt)
    last_response.meta.setdefault("retry_exhausted", True)
    return last_response
