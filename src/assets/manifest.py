# src/assets/manifest.py - v1
"""Manifest builder: hash scanned files and map logical paths to content keys.

Hashing runs on a bounded pool of worker threads. Workers only return
FileRecords; the manifest itself is assembled afterwards by a single
collector, in scan order, so no mutable state is shared between workers.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from pathlib import Path

from pagesync.assets.hasher import compute_content_key, extension_of, read_file_bytes
from pagesync.assets.mime import content_type_for
from pagesync.assets.models import FileRecord, FolderStats, Manifest
from pagesync.core.cancellation import raise_if_cancelled

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

_MULTI_SLASH = re.compile(r"/{2,}")


def normalize_logical_path(relative_path: str) -> str:
    """Normalize to POSIX separators with exactly one leading '/'."""
    path = _MULTI_SLASH.sub("/", relative_path.replace("\\", "/"))
    return "/" + path.lstrip("/")


def hash_file(root: Path, relative_path: str, max_bytes: int | None = None) -> FileRecord:
    """Read one file and build its FileRecord (blocking)."""
    content = read_file_bytes(root / relative_path, max_bytes)
    extension = extension_of(relative_path)
    return FileRecord(
        logical_path=normalize_logical_path(relative_path),
        content=content,
        content_key=compute_content_key(content, extension),
        content_type=content_type_for(extension),
        extension=extension,
        size_bytes=len(content),
    )


def assemble_manifest(records: Sequence[FileRecord]) -> Manifest:
    """Collect records into a Manifest. A repeated logical path: later wins."""
    by_path: dict[str, FileRecord] = {}
    duplicates: list[str] = []
    for record in records:
        if record.logical_path in by_path:
            logger.warning(
                "Duplicate logical path %s, keeping the later entry",
                record.logical_path,
            )
            duplicates.append(record.logical_path)
        by_path[record.logical_path] = record

    return Manifest(
        entries={path: r.content_key for path, r in by_path.items()},
        records=list(by_path.values()),
        duplicates=duplicates,
    )


class ManifestBuilder:
    """Hash files concurrently and assemble the deployment manifest.

    Args:
        max_file_size_bytes: Per-file size guard (None = unlimited).
        max_workers: Maximum number of files hashed at once.
    """

    def __init__(
        self,
        max_file_size_bytes: int | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._max_bytes = max_file_size_bytes
        self._max_workers = max_workers

    async def build(
        self,
        root: Path,
        relative_paths: Sequence[str],
        cancel_event: asyncio.Event | None = None,
    ) -> Manifest:
        """Hash every file and return the manifest.

        Raises:
            FileTooLargeError: If any file exceeds the size guard.
            DeploymentCancelled: If ``cancel_event`` is set while hashing.
        """
        semaphore = asyncio.Semaphore(self._max_workers)

        async def worker(relative_path: str) -> FileRecord:
            async with semaphore:
                raise_if_cancelled(cancel_event, "hash")
                return await asyncio.to_thread(
                    hash_file, root, relative_path, self._max_bytes,
                )

        tasks = [asyncio.create_task(worker(p)) for p in relative_paths]
        try:
            records = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        manifest = assemble_manifest(records)
        logger.info(
            "Built manifest: %d paths, %d unique keys, %d bytes",
            len(manifest), len(manifest.keys()), manifest.total_size,
        )
        return manifest


def compute_folder_stats(root: Path, relative_paths: Sequence[str]) -> FolderStats:
    """Count files, total bytes and files per extension."""
    total_size = 0
    file_types: dict[str, int] = {}
    for relative_path in relative_paths:
        total_size += (root / relative_path).stat().st_size
        extension = extension_of(relative_path) or "no-extension"
        file_types[extension] = file_types.get(extension, 0) + 1

    return FolderStats(
        total_files=len(relative_paths),
        total_size=total_size,
        file_types=file_types,
    )
