# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Latest CI build lookup via the GitHub Actions REST API."""

from __future__ import annotations

import logging
import re
from typing import Any

from .config import GitHubSettings, load_github_settings
from .errors import BuildLookupError, error_category_to_reason
from .http.client import HttpClient
from .http.models import HttpRequest, RetryConfig
from .http.retry import send_with_retries

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github+json"
GITHUB_API_VERSION = "2022-11-28"
_REPOSITORY_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class BuildDateLookup:
    """Return the creation timestamp of the most recent workflow run of a repository."""

    def __init__(
        self,
        client: HttpClient,
        settings: GitHubSettings | None = None,
        *,
        retry_config: RetryConfig | None = None,
    ):
        self.client = client
        self.settings = settings or load_github_settings()
        self.retry_config = retry_config

    def runs_url(self, repository: str) -> str:
        return f"{self.settings.api_base}/repos/{repository}/actions/runs"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": GITHUB_ACCEPT,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if self.settings.token:
            headers["Authorization"] = f"Bearer {self.settings.token}"
        return headers

    def latest_run_date(self, repository: str | None = None, *, branch: str | None = None) -> str:
        repository = (repository or self.settings.repository or "").strip()
        if not _REPOSITORY_RE.match(repository):
            raise BuildLookupError(f"Invalid repository {repository!r}; expected OWNER/NAME")
        branch = branch or self.settings.branch

        params = {"per_page": "1"}
        if branch:
            params["branch"] = branch

        request = HttpRequest(
            url=self.runs_url(repository),
            method="GET",
            headers=self._headers(),
            params=params,
            allow_redirects=True,
        )
        response = send_with_retries(self.client, request, retry_config=self.retry_config)

        if not response.ok:
            reason = error_category_to_reason(response.error_category) or "request failed"
            raise BuildLookupError(f"GitHub API unreachable ({reason}): {response.error_message}")

        status = response.status_code or 0
        if not 200 <= status < 300:
            raise BuildLookupError(f"GitHub API error: {status} for {repository}", status_code=status)

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise BuildLookupError(f"GitHub API returned invalid JSON for {repository}") from exc

        runs = payload.get("workflow_runs") if isinstance(payload, dict) else None
        if not runs:
            raise BuildLookupError(f"No workflow runs found for {repository}")

        created_at = runs[0].get("created_at") if isinstance(runs[0], dict) else None
        if not isinstance(created_at, str) or not created_at:
            raise BuildLookupError(f"Latest workflow run for {repository} has no created_at")

        logger.info("Latest build for %s: %s", repository, created_at)
        return created_at


__all__ = ["BuildDateLookup", "GITHUB_ACCEPT", "GITHUB_API_VERSION"]
