# src/main.py - v1
"""CLI entry point: deploy, manifest, stats, status commands.

Usage:
    pagesync deploy <folder> --project NAME
    pagesync manifest <folder>
    pagesync stats <folder>
    pagesync status <project> [--deployment-id ID]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pagesync.version import __version__

if TYPE_CHECKING:
    from pagesync.assets.models import FolderStats

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="pagesync",
        description=f"pagesync v{__version__} - content-addressable static site deployer",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--api-url", default=None,
        help="Remote store base URL (default: PAGESYNC_API_BASE_URL)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- deploy ---
    p_deploy = subparsers.add_parser(
        "deploy", help="Deploy a folder as a new deployment",
    )
    p_deploy.add_argument("folder", type=Path, help="Site root directory")
    p_deploy.add_argument(
        "-p", "--project", required=True,
        help="Project name (created if missing)",
    )
    p_deploy.set_defaults(func=_cmd_deploy)

    # --- manifest ---
    p_manifest = subparsers.add_parser(
        "manifest", help="Print the manifest for a folder (no upload)",
    )
    p_manifest.add_argument("folder", type=Path, help="Site root directory")
    p_manifest.set_defaults(func=_cmd_manifest)

    # --- stats ---
    p_stats = subparsers.add_parser(
        "stats", help="Show file statistics for a folder",
    )
    p_stats.add_argument("folder", type=Path, help="Site root directory")
    p_stats.set_defaults(func=_cmd_stats)

    # --- status ---
    p_status = subparsers.add_parser(
        "status", help="Show deployment status of a project",
    )
    p_status.add_argument("project", help="Project name")
    p_status.add_argument(
        "--deployment-id", default=None,
        help="Deployment id (default: latest deployment)",
    )
    p_status.set_defaults(func=_cmd_status)

    return parser


def _load_settings(args: argparse.Namespace):
    from pagesync.config.settings import load_settings

    overrides: dict[str, object] = {}
    if args.api_url:
        overrides["api_base_url"] = args.api_url
    return load_settings(**overrides)


async def _cmd_deploy(args: argparse.Namespace, settings) -> int:
    """Execute a full deployment run."""
    from pagesync.api.facade import deploy

    outcome = await deploy(args.project, args.folder, settings=settings)
    if not outcome.success:
        print(f"\nDeployment failed ({outcome.failed_stage or 'unknown stage'}):")
        print(f"  Project:  {outcome.project}")
        print(f"  Error:    {outcome.message}")
        if outcome.retryable:
            print("  The failure looks transient; re-running is safe.")
        return 1

    print("\nDeployment complete:")
    print(f"  Project:        {outcome.project}")
    print(f"  Deployment ID:  {outcome.deployment_id}")
    print(f"  Status:         {outcome.status}")
    if outcome.url:
        print(f"  URL:            {outcome.url}")
    if outcome.stats:
        _print_stats(outcome.stats)
    return 0


async def _cmd_manifest(args: argparse.Namespace, settings) -> int:
    """Print the path -> content key manifest as JSON."""
    from pagesync.api.facade import build_manifest

    manifest = await build_manifest(args.folder, settings=settings)
    print(json.dumps(manifest.entries, indent=2, sort_keys=True))
    return 0


async def _cmd_stats(args: argparse.Namespace, settings) -> int:
    """Display file statistics for a folder."""
    from pagesync.api.facade import folder_stats

    stats = folder_stats(args.folder, settings=settings)
    print(f"\nStatistics for {args.folder}:")
    _print_stats(stats)
    return 0


async def _cmd_status(args: argparse.Namespace, settings) -> int:
    """Display deployment status."""
    from pagesync.api.facade import deployment_status

    status = await deployment_status(
        args.project, args.deployment_id, settings=settings,
    )
    print(f"\nDeployment status for {args.project}:")
    if status.id:
        print(f"  Deployment ID:  {status.id}")
    print(f"  Status:         {status.status} ({status.progress}%)")
    if status.url:
        print(f"  URL:            {status.url}")
    if status.error_message:
        print(f"  Error:          {status.error_message}")
    for line in status.logs:
        print(f"    {line}")
    return 1 if status.status == "failure" else 0


def _print_stats(stats: FolderStats) -> None:
    print(f"  Files:          {stats.total_files}")
    print(f"  Total size:     {stats.total_size / 1024 / 1024:.2f} MB")
    for ext, count in sorted(stats.file_types.items()):
        print(f"    .{ext:<12s} {count}")


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from pagesync.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
