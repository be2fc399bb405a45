# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import socket
import ssl

import httpx
import pytest

from storemeta import config
from storemeta.config import DEFAULT_USER_AGENT
from storemeta.errors import (
    ErrorCategory,
    InvalidLocation,
    ProbeTimeout,
    StoremetaError,
    TransportError,
    UnexpectedStatus,
    categorize_exception,
    error_category_to_reason,
)
from storemeta.log import resolve_log_level, setup_logging

_HTTP_ENV = (
    "STOREMETA_HTTP_TIMEOUT",
    "STOREMETA_MAX_REDIRECTS",
    "STOREMETA_HTTP_RETRIES",
    "STOREMETA_HTTP_BACKOFF",
    "STOREMETA_HTTP_INITIAL_DELAY",
    "STOREMETA_USER_AGENT",
    "STOREMETA_HTTP_VERIFY_SSL",
    "STOREMETA_HTTP_MAX_BODY_BYTES",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _HTTP_ENV + ("STOREMETA_GITHUB_API", "STOREMETA_GITHUB_REPO", "STOREMETA_GITHUB_BRANCH", "GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def test_http_settings_defaults():
    settings = config.load_http_settings()
    assert settings.timeout == 10.0
    assert settings.max_redirects == 10
    assert settings.verify_ssl is True
    assert settings.user_agent == DEFAULT_USER_AGENT


def test_http_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("STOREMETA_HTTP_TIMEOUT", "5.5")
    monkeypatch.setenv("STOREMETA_MAX_REDIRECTS", "3")
    monkeypatch.setenv("STOREMETA_HTTP_RETRIES", "0")
    monkeypatch.setenv("STOREMETA_HTTP_BACKOFF", "1.5")
    monkeypatch.setenv("STOREMETA_HTTP_INITIAL_DELAY", "0.1")
    monkeypatch.setenv("STOREMETA_USER_AGENT", "CustomAgent/1.0")
    monkeypatch.setenv("STOREMETA_HTTP_VERIFY_SSL", "0")
    monkeypatch.setenv("STOREMETA_HTTP_MAX_BODY_BYTES", "1024")

    settings = config.load_http_settings()

    assert settings.timeout == 5.5
    assert settings.max_redirects == 3
    assert settings.max_retries == 0  # retry config clamps later
    assert settings.backoff_factor == 1.5
    assert settings.initial_delay == 0.1
    assert settings.user_agent == "CustomAgent/1.0"
    assert settings.verify_ssl is False
    assert settings.max_body_bytes == 1024


def test_http_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("STOREMETA_HTTP_TIMEOUT", "not-a-number")
    monkeypatch.setenv("STOREMETA_MAX_REDIRECTS", "-2")
    monkeypatch.setenv("STOREMETA_HTTP_RETRIES", "ten")
    monkeypatch.setenv("STOREMETA_HTTP_BACKOFF", "")
    monkeypatch.setenv("STOREMETA_HTTP_MAX_BODY_BYTES", "0")

    settings = config.load_http_settings()

    assert settings.timeout == config.HttpSettings.timeout
    assert settings.max_redirects == config.HttpSettings.max_redirects
    assert settings.max_retries == config.HttpSettings.max_retries
    assert settings.backoff_factor == config.HttpSettings.backoff_factor
    assert settings.max_body_bytes == config.HttpSettings.max_body_bytes


def test_non_positive_timeout_falls_back(monkeypatch):
    monkeypatch.setenv("STOREMETA_HTTP_TIMEOUT", "0")
    assert config.load_http_settings().timeout == 10.0


def test_load_http_settings_reads_env_at_call_time(monkeypatch):
    monkeypatch.setenv("STOREMETA_HTTP_TIMEOUT", "7.7")
    assert config.load_http_settings().timeout == 7.7
    monkeypatch.setenv("STOREMETA_HTTP_TIMEOUT", "8.8")
    assert config.load_http_settings().timeout == 8.8


def test_github_settings_defaults_and_overrides(monkeypatch):
    defaults = config.load_github_settings()
    assert defaults.api_base == "https://api.github.com"
    assert defaults.repository == "Seeike/Sora"
    assert defaults.branch is None
    assert defaults.token is None

    monkeypatch.setenv("STOREMETA_GITHUB_API", "https://ghe.example.test/api/v3/")
    monkeypatch.setenv("STOREMETA_GITHUB_REPO", "acme/app")
    monkeypatch.setenv("STOREMETA_GITHUB_BRANCH", "main")
    monkeypatch.setenv("GITHUB_TOKEN", "  secret  ")
    settings = config.load_github_settings()
    assert settings.api_base == "https://ghe.example.test/api/v3"
    assert settings.repository == "acme/app"
    assert settings.branch == "main"
    assert settings.token == "secret"


def test_github_settings_blank_env_uses_defaults(monkeypatch):
    monkeypatch.setenv("STOREMETA_GITHUB_REPO", "   ")
    monkeypatch.setenv("GITHUB_TOKEN", "")
    settings = config.load_github_settings()
    assert settings.repository == "Seeike/Sora"
    assert settings.token is None


def _request() -> httpx.Request:
    return httpx.Request("HEAD", "https://example.test/")


def test_categorize_httpx_exceptions():
    assert categorize_exception(httpx.ReadTimeout("slow", request=_request())) == ErrorCategory.TIMEOUT
    assert categorize_exception(httpx.ConnectTimeout("slow", request=_request())) == ErrorCategory.TIMEOUT
    assert categorize_exception(httpx.ConnectError("refused", request=_request())) == ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(httpx.RemoteProtocolError("bad", request=_request())) == ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(httpx.UnsupportedProtocol("ftp", request=_request())) == ErrorCategory.INVALID_INPUT
    assert categorize_exception(RuntimeError("other")) == ErrorCategory.UNKNOWN_ERROR


def test_categorize_follows_cause_chain():
    dns = httpx.ConnectError("lookup failed", request=_request())
    dns.__cause__ = socket.gaierror(-2, "Name or service not known")
    assert categorize_exception(dns) == ErrorCategory.DNS_ERROR

    tls = httpx.ConnectError("handshake failed", request=_request())
    tls.__cause__ = ssl.SSLCertVerificationError("certificate verify failed")
    assert categorize_exception(tls) == ErrorCategory.SSL_ERROR


def test_categorize_plain_socket_errors():
    assert categorize_exception(ConnectionRefusedError()) == ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ssl.SSLError()) == ErrorCategory.SSL_ERROR


def test_error_category_reason_mapping():
    assert error_category_to_reason(ErrorCategory.TIMEOUT) == "Network timeout"
    assert error_category_to_reason(ErrorCategory.REDIRECT_LOOP) == "Too many redirects"
    assert error_category_to_reason(None) == ""


def test_every_error_category_names_a_failure():
    assert "NONE" not in ErrorCategory.__members__
    for category in ErrorCategory:
        assert error_category_to_reason(category)


def test_probe_errors_share_base_and_carry_context():
    err = UnexpectedStatus(404, url="https://example.test/x")
    assert isinstance(err, StoremetaError)
    assert err.status_code == 404
    assert err.url == "https://example.test/x"
    assert err.reason == "Unexpected HTTP status"

    transport = TransportError("boom", url="https://example.test/x", cause=ErrorCategory.DNS_ERROR)
    assert transport.category == ErrorCategory.DNS_ERROR
    assert ProbeTimeout("late").category == ErrorCategory.TIMEOUT
    assert InvalidLocation("bad").category == ErrorCategory.INVALID_INPUT


def test_resolve_log_level():
    assert resolve_log_level("debug") == logging.DEBUG
    assert resolve_log_level("INFO") == logging.INFO
    assert resolve_log_level("nonsense") == logging.WARNING


def test_setup_logging_quiets_httpx_unless_debugging():
    setup_logging("INFO")
    assert logging.getLogger("httpx").level == logging.WARNING
    setup_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.DEBUG
