# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
storemeta package entrypoint.

Keeps an app source manifest current: the IPA size comes from a HEAD request that
follows redirects under a hop bound and a timeout, and the build date comes from the
latest GitHub Actions run. HTTP behavior sits behind an injectable client interface.
"""

from .builds import BuildDateLookup
from .config import GitHubSettings, HttpSettings, load_github_settings, load_http_settings
from .errors import (
    BuildLookupError,
    ErrorCategory,
    InvalidLocation,
    MalformedSizeHeader,
    ManifestError,
    MissingSizeHeader,
    ProbeError,
    ProbeTimeout,
    RedirectLoop,
    StoremetaError,
    TransportError,
    UnexpectedStatus,
)
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, StubHttpClient, create_default_http_client
from .log import setup_logging
from .manifest import Manifest, ManifestUpdate
from .probe import ProbeResult, RemoteResourceProbe
from .runtime import ManifestRefresher
from .version import __version__

__all__ = [
    "BuildDateLookup",
    "BuildLookupError",
    "ErrorCategory",
    "GitHubSettings",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "InvalidLocation",
    "MalformedSizeHeader",
    "Manifest",
    "ManifestError",
    "ManifestRefresher",
    "ManifestUpdate",
    "MissingSizeHeader",
    "ProbeError",
    "ProbeResult",
    "ProbeTimeout",
    "RedirectLoop",
    "RemoteResourceProbe",
    "StoremetaError",
    "StubHttpClient",
    "TransportError",
    "UnexpectedStatus",
    "create_default_http_client",
    "load_github_settings",
    "load_http_settings",
    "setup_logging",
    "__version__",
]
