# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level facade that refreshes a manifest's size and build date."""

from __future__ import annotations

import logging
import os
from contextlib import suppress

from .builds import BuildDateLookup
from .config import GitHubSettings, HttpSettings, load_github_settings, load_http_settings
from .http.client import HttpClient, create_default_http_client
from .manifest import Manifest, ManifestUpdate
from .probe import RemoteResourceProbe

logger = logging.getLogger(__name__)


class ManifestRefresher:
    """
    Wires one shared HTTP client into the size probe and the build lookup.

    The manifest is only written after both remote lookups have succeeded, so a failed
    run leaves the file on disk untouched.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        http_settings: HttpSettings | None = None,
        github_settings: GitHubSettings | None = None,
    ):
        self.http_settings = http_settings or load_http_settings()
        self.github_settings = github_settings or load_github_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)
        self.probe = RemoteResourceProbe(self.http_client, settings=self.http_settings)
        self.build_lookup = BuildDateLookup(self.http_client, self.github_settings)

    def refresh(
        self,
        path: str | os.PathLike[str],
        *,
        repository: str | None = None,
        branch: str | None = None,
        dry_run: bool = False,
    ) -> ManifestUpdate:
        manifest = Manifest.load(path)

        target = manifest.probe_url()
        logger.info("Fetching size for: %s", target)
        size = self.probe.probe(target).size
        build_date = self.build_lookup.latest_run_date(repository, branch=branch)

        update = ManifestUpdate(size_bytes=size, build_date=build_date)
        manifest.apply(update)
        if dry_run:
            logger.info("Dry run; not writing %s", manifest.path)
        else:
            manifest.save()
            logger.info("Updated %s: %d bytes (%s), date %s", manifest.path, size, update.size_label, build_date)
        return update

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> ManifestRefresher:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
