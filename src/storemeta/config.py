# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for storemeta."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"storemeta/{__version__} (+manifest refresher)"
DEFAULT_GITHUB_API = "https://api.github.com"
DEFAULT_GITHUB_REPOSITORY = "Seeike/Sora"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _str_env(name: str, default: str | None) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = 10.0
    max_redirects: int = 10
    max_retries: int = 2
    backoff_factor: float = 2.0
    initial_delay: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    max_body_bytes: int = 4 * 1024 * 1024

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        timeout = _float_env("STOREMETA_HTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        max_redirects = _int_env("STOREMETA_MAX_REDIRECTS", cls.max_redirects)
        if max_redirects < 0:
            max_redirects = cls.max_redirects
        max_body_bytes = _int_env("STOREMETA_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            timeout=timeout,
            max_redirects=max_redirects,
            max_retries=_int_env("STOREMETA_HTTP_RETRIES", cls.max_retries),
            backoff_factor=_float_env("STOREMETA_HTTP_BACKOFF", cls.backoff_factor),
            initial_delay=_float_env("STOREMETA_HTTP_INITIAL_DELAY", cls.initial_delay),
            user_agent=os.getenv("STOREMETA_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("STOREMETA_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
        )


@dataclass
class GitHubSettings:
    """Where to look up the latest CI build."""

    api_base: str = DEFAULT_GITHUB_API
    repository: str = DEFAULT_GITHUB_REPOSITORY
    branch: str | None = None
    token: str | None = None

    @classmethod
    def from_env(cls) -> "GitHubSettings":
        return cls(
            api_base=(_str_env("STOREMETA_GITHUB_API", cls.api_base) or cls.api_base).rstrip("/"),
            repository=_str_env("STOREMETA_GITHUB_REPO", cls.repository) or cls.repository,
            branch=_str_env("STOREMETA_GITHUB_BRANCH", None),
            token=_str_env("GITHUB_TOKEN", None),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


def load_github_settings() -> GitHubSettings:
    """Load GitHub API settings from environment."""
    return GitHubSettings.from_env()
