# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""App source manifest (AltStore-style repo.json) loading, updating and persistence."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ManifestError
from .http.url import to_raw_github_url

BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class ManifestUpdate:
    size_bytes: int
    build_date: str

    @property
    def size_label(self) -> str:
        return f"{self.size_bytes / BYTES_PER_MB:.2f} MB"

    def to_dict(self) -> dict[str, Any]:
        return {
            "size_bytes": self.size_bytes,
            "size_label": self.size_label,
            "build_date": self.build_date,
        }


class Manifest:
    """
    A loaded manifest document.

    Only the first app and its first version are touched; every other key is kept
    as-is and in its original order.
    """

    def __init__(self, data: dict[str, Any], path: Path | None = None):
        self.data = data
        self.path = path
        self._app()
        self._version()

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> Manifest:
        manifest_path = Path(path)
        try:
            raw = manifest_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ManifestError(f"Manifest not found: {manifest_path}") from exc
        except OSError as exc:
            raise ManifestError(f"Cannot read manifest {manifest_path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise ManifestError(f"Manifest {manifest_path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ManifestError(f"Manifest {manifest_path} must contain a JSON object")
        return cls(data, manifest_path)

    def _app(self) -> dict[str, Any]:
        apps = self.data.get("apps")
        if not isinstance(apps, list) or not apps or not isinstance(apps[0], dict):
            raise ManifestError("Manifest has no apps[0] entry")
        return apps[0]

    def _version(self) -> dict[str, Any]:
        versions = self._app().get("versions")
        if not isinstance(versions, list) or not versions or not isinstance(versions[0], dict):
            raise ManifestError("Manifest has no apps[0].versions[0] entry")
        return versions[0]

    @property
    def download_url(self) -> str:
        url = self._version().get("downloadURL")
        if not isinstance(url, str) or not url.strip():
            raise ManifestError("Manifest apps[0].versions[0].downloadURL is missing")
        return url.strip()

    def probe_url(self) -> str:
        return to_raw_github_url(self.download_url)

    def apply(self, update: ManifestUpdate) -> None:
        app = self._app()
        version = self._version()
        version["size"] = update.size_bytes
        app["size"] = update.size_bytes
        version["date"] = update.build_date
        app["versionDate"] = update.build_date
        self.data["ipa_size"] = update.size_label
        self.data["lastBuildDate"] = update.build_date

    def dumps(self) -> str:
        return json.dumps(self.data, indent=2, ensure_ascii=False) + "\n"

    def save(self, path: str | os.PathLike[str] | None = None) -> Path:
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ManifestError("No path to save manifest to")
        payload = self.dumps()
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            # mkstemp creates 0600 files; keep the existing manifest's mode.
            if target.exists():
                os.chmod(tmp_name, target.stat().st_mode & 0o777)
            os.replace(tmp_name, target)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise ManifestError(f"Cannot write manifest {target}: {exc}") from exc
        self.path = target
        return target


__all__ = ["BYTES_PER_MB", "Manifest", "ManifestUpdate"]
