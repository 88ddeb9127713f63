# src/sync/pipeline.py - v1
"""Deployment pipeline: scan -> hash -> diff -> upload missing -> submit.

Stages run strictly in sequence and the first failure stops the run. The
upload credential is issued once per run and handed explicitly to the diff
and upload stages; it is never stored on the pipeline or the client, so
concurrent runs for different projects cannot see each other's credential.

A manifest is submitted only after every key it references is known to be
held by the remote store.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from pagesync.assets.manifest import ManifestBuilder
from pagesync.assets.models import FolderStats, Manifest
from pagesync.assets.scanner import DirectoryScanner
from pagesync.core.cancellation import raise_if_cancelled, run_cancellable
from pagesync.core.errors import (
    DeploymentCancelled,
    DeploymentFailed,
    InvalidInputError,
    PageSyncError,
)
from pagesync.logging.context import set_run_context, set_stage_context
from pagesync.sync.credentials import CredentialIssuer
from pagesync.sync.diff import RemoteDiffChecker
from pagesync.sync.models import SyncResult
from pagesync.sync.submitter import DeploymentSubmitter
from pagesync.sync.uploader import UploadBatcher

if TYPE_CHECKING:
    from pagesync.config.settings import Settings
    from pagesync.remote.client import PagesApiClient

logger = logging.getLogger(__name__)

STAGE_SCAN = "scan"
STAGE_HASH = "hash"
STAGE_PROJECT = "ensure_project"
STAGE_CREDENTIAL = "credential"
STAGE_DIFF = "diff"
STAGE_UPLOAD = "upload"
STAGE_SUBMIT = "submit"


def stats_from_manifest(manifest: Manifest) -> FolderStats:
    """Folder statistics from already-hashed records (no extra I/O)."""
    file_types: dict[str, int] = {}
    for record in manifest.records:
        extension = record.extension or "no-extension"
        file_types[extension] = file_types.get(extension, 0) + 1
    return FolderStats(
        total_files=len(manifest.records),
        total_size=manifest.total_size,
        file_types=file_types,
    )


@contextmanager
def _stage(stage: str, project: str) -> Iterator[None]:
    """Tag logs with ``stage`` and wrap failures in DeploymentFailed."""
    set_stage_context(stage)
    try:
        yield
    except (DeploymentCancelled, DeploymentFailed):
        raise
    except (PageSyncError, OSError) as e:
        logger.error("Stage %s failed: %s", stage, e)
        raise DeploymentFailed(stage, project, str(e), cause=e) from e
    finally:
        set_stage_context(None)


class DeploymentPipeline:
    """Run one deployment of a local folder to a project.

    Args:
        client: Open PagesApiClient, shared by the remote stages.
        settings: Timeouts, size guard, worker count and ignore list.
        scanner: Override the directory scanner.
        builder: Override the manifest builder.
    """

    def __init__(
        self,
        client: PagesApiClient,
        settings: Settings | None = None,
        scanner: DirectoryScanner | None = None,
        builder: ManifestBuilder | None = None,
    ) -> None:
        if settings is None:
            from pagesync.config.settings import Settings

            settings = Settings()
        self._settings = settings
        self._scanner = scanner or DirectoryScanner(settings.ignore_patterns_list)
        self._builder = builder or ManifestBuilder(
            max_file_size_bytes=settings.max_file_size_bytes,
            max_workers=settings.hash_workers,
        )
        self._issuer = CredentialIssuer(client)
        self._diff = RemoteDiffChecker(client, timeout=settings.check_missing_timeout_s)
        self._uploader = UploadBatcher(client, timeout=settings.upload_timeout_s)
        self._submitter = DeploymentSubmitter(client, timeout=settings.deploy_timeout_s)

    async def build_manifest(
        self,
        project: str,
        root: Path,
        cancel_event: asyncio.Event | None = None,
    ) -> Manifest:
        """Scan and hash ``root`` without touching the remote store."""
        with _stage(STAGE_SCAN, project):
            raise_if_cancelled(cancel_event, STAGE_SCAN)
            paths = await asyncio.to_thread(self._scanner.scan, root)
            if not paths:
                raise InvalidInputError(f"No deployable files in {root}")

        with _stage(STAGE_HASH, project):
            return await self._builder.build(root, paths, cancel_event)

    async def run(
        self,
        project: str,
        root: Path,
        cancel_event: asyncio.Event | None = None,
    ) -> SyncResult:
        """Deploy ``root`` as a new deployment of ``project``.

        Raises:
            DeploymentFailed: Identifies the failing stage; ``cause`` holds
                the typed error.
            DeploymentCancelled: If ``cancel_event`` was set before submit.
        """
        t0 = time.perf_counter()
        run_id = uuid.uuid4().hex[:12]
        set_run_context(project, run_id)

        if not project or not project.strip():
            raise DeploymentFailed(STAGE_SCAN, project, "Project name is required")

        logger.info("Starting deployment run %s of %s", run_id, root)

        manifest = await self.build_manifest(project, root, cancel_event)
        stats = stats_from_manifest(manifest)
        logger.info(
            "Found %d files, total size: %.2f MB",
            stats.total_files, stats.total_size / 1024 / 1024,
        )

        with _stage(STAGE_PROJECT, project):
            await run_cancellable(
                self._submitter.ensure_project(project), cancel_event, STAGE_PROJECT,
            )

        with _stage(STAGE_CREDENTIAL, project):
            credential = await run_cancellable(
                self._issuer.issue(project), cancel_event, STAGE_CREDENTIAL,
            )

        with _stage(STAGE_DIFF, project):
            missing = await run_cancellable(
                self._diff.find_missing(credential, manifest.keys()),
                cancel_event, STAGE_DIFF,
            )

        with _stage(STAGE_UPLOAD, project):
            report = await run_cancellable(
                self._uploader.upload_missing(credential, manifest.records, missing),
                cancel_event, STAGE_UPLOAD,
            )

        with _stage(STAGE_SUBMIT, project):
            result = await run_cancellable(
                self._submitter.submit(project, dict(manifest.entries)),
                cancel_event, STAGE_SUBMIT,
            )
            if result.status == "failure":
                raise DeploymentFailed(
                    STAGE_SUBMIT, project,
                    result.error_message or "Deployment failed",
                )

        duration = round(time.perf_counter() - t0, 2)
        logger.info(
            "Deployment %s complete in %.2fs: %d uploaded, %d already present",
            result.id, duration, len(report.uploaded_keys),
            len(manifest.keys()) - len(missing),
        )

        return SyncResult(
            project=project,
            run_id=run_id,
            deployment_id=result.id,
            url=result.url,
            status=result.status,
            stats=stats,
            manifest=dict(manifest.entries),
            missing_count=len(missing),
            uploaded_keys=report.uploaded_keys,
            uploaded_bytes=report.uploaded_bytes,
            duration_seconds=duration,
        )
