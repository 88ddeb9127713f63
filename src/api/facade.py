# src/api/facade.py - v1
"""Public API facade: deploy a folder, build a manifest, inspect a project.

Usage:
    from pagesync.api.facade import deploy
    outcome = await deploy("my-site", Path("./dist"))
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pagesync.api.models import DeployOutcome, DeployRequest
from pagesync.assets.manifest import ManifestBuilder, compute_folder_stats
from pagesync.assets.models import FolderStats, Manifest
from pagesync.assets.scanner import DirectoryScanner
from pagesync.config.settings import Settings
from pagesync.core.errors import DeploymentCancelled, DeploymentFailed
from pagesync.remote.client import PagesApiClient
from pagesync.sync.pipeline import DeploymentPipeline
from pagesync.sync.submitter import DeploymentSubmitter

if TYPE_CHECKING:
    import httpx

    from pagesync.remote.models import DeploymentStatus

logger = logging.getLogger(__name__)


def _client_for(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PagesApiClient:
    token = settings.api_token.get_secret_value() if settings.api_token else None
    return PagesApiClient(
        settings.api_base_url,
        api_token=token,
        timeout=settings.request_timeout_s,
        transport=transport,
    )


async def deploy(
    project_name: str,
    folder_path: Path,
    settings: Settings | None = None,
    cancel_event: asyncio.Event | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> DeployOutcome:
    """Deploy ``folder_path`` to ``project_name`` end-to-end.

    Never raises for pipeline failures: they are returned as a
    DeployOutcome with ``success=False``, the failed stage, and a message.

    Args:
        project_name: Target project; created if it does not exist.
        folder_path: Root of the static site.
        settings: Global settings. Loaded from .env if None.
        cancel_event: Set to abort the run before the manifest is submitted.
        transport: Optional httpx transport (testing).
    """
    settings = settings or Settings()
    request = DeployRequest(project_name=project_name, folder_path=folder_path)

    try:
        async with _client_for(settings, transport) as client:
            pipeline = DeploymentPipeline(client, settings=settings)
            result = await pipeline.run(
                request.project_name, request.folder_path, cancel_event,
            )
    except DeploymentFailed as e:
        logger.error("Deployment failed: %s", e)
        return DeployOutcome(
            success=False,
            project=project_name,
            message=e.message,
            failed_stage=e.stage,
            error_type=e.error_type,
            retryable=e.retryable,
        )
    except DeploymentCancelled as e:
        logger.warning("Deployment cancelled: %s", e)
        return DeployOutcome(
            success=False,
            project=project_name,
            message=str(e),
            failed_stage=e.stage,
            error_type="DeploymentCancelled",
        )

    return DeployOutcome(
        success=True,
        project=result.project,
        message="Project deployed successfully",
        deployment_id=result.deployment_id,
        url=result.url,
        status=result.status,
        stats=result.stats,
    )


async def build_manifest(
    folder_path: Path,
    settings: Settings | None = None,
) -> Manifest:
    """Scan and hash ``folder_path`` without contacting the remote store."""
    settings = settings or Settings()
    scanner = DirectoryScanner(settings.ignore_patterns_list)
    paths = scanner.scan(folder_path)
    builder = ManifestBuilder(
        max_file_size_bytes=settings.max_file_size_bytes,
        max_workers=settings.hash_workers,
    )
    return await builder.build(folder_path, paths)


def folder_stats(folder_path: Path, settings: Settings | None = None) -> FolderStats:
    """File count, total size and extension histogram of a site folder."""
    settings = settings or Settings()
    scanner = DirectoryScanner(settings.ignore_patterns_list)
    return compute_folder_stats(folder_path, scanner.scan(folder_path))


async def deployment_status(
    project_name: str,
    deployment_id: str | None = None,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> DeploymentStatus:
    """Status of a deployment (latest one when no id is given)."""
    settings = settings or Settings()
    async with _client_for(settings, transport) as client:
        submitter = DeploymentSubmitter(client, timeout=settings.deploy_timeout_s)
        return await submitter.get_status(project_name, deployment_id)
