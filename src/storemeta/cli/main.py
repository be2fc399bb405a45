# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""storemeta CLI."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Any

from ..config import HttpSettings, load_github_settings, load_http_settings
from ..errors import ProbeError, StoremetaError
from ..http import create_default_http_client
from ..log import setup_logging
from ..runtime import ManifestRefresher

logger = logging.getLogger("storemeta")

DEFAULT_MANIFEST = "sorarepo.json"


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be positive")
    return parsed


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Refresh an app source manifest with the IPA size and the latest CI build date"
    )
    parser.add_argument("manifest", nargs="?", default=DEFAULT_MANIFEST, help=f"Manifest JSON path (default: {DEFAULT_MANIFEST})")
    parser.add_argument("--repo", help="GitHub repository (OWNER/NAME) whose Actions runs date the build")
    parser.add_argument("--branch", help="Only consider workflow runs on this branch")
    parser.add_argument("--timeout", type=_positive_float, help="Seconds allowed for the size probe, redirects included")
    parser.add_argument("--max-redirects", type=_non_negative_int, help="Maximum redirects followed by the size probe")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification",
    )
    parser.add_argument("--dry-run", action="store_true", help="Compute the update without writing the manifest")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of a human-friendly summary",
    )
    parser.add_argument("--log-level", help="Logging level (default: STOREMETA_LOG_LEVEL or WARNING)")
    return parser


def _settings_from_args(args: argparse.Namespace) -> HttpSettings:
    settings = load_http_settings()
    overrides: dict[str, Any] = {}
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.max_redirects is not None:
        overrides["max_redirects"] = args.max_redirects
    if args.ignore_ssl_errors:
        overrides["verify_ssl"] = False
    return replace(settings, **overrides) if overrides else settings


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings = _settings_from_args(args)
    http_client = create_default_http_client(settings)

    try:
        with ManifestRefresher(
            http_client=http_client,
            http_settings=settings,
            github_settings=load_github_settings(),
        ) as refresher:
            update = refresher.refresh(args.manifest, repository=args.repo, branch=args.branch, dry_run=args.dry_run)
    except ProbeError as exc:
        logger.error("%s: %s", exc.reason, exc)
        return 1
    except StoremetaError as exc:
        logger.error("%s", exc)
        return 1

    if args.json:
        payload = {**update.to_dict(), "manifest": str(args.manifest), "written": not args.dry_run}
        json.dump(payload, sys.stdout, indent=2, sort_keys=True)
        sys.stdout.write("\n")
    else:
        verb = "Would update" if args.dry_run else "Updated"
        print(f"{verb} {args.manifest}: {update.size_bytes} bytes ({update.size_label}), date {update.build_date}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
