# src/sync/models.py - v1
"""Pipeline result model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pagesync.assets.models import FolderStats
from pagesync.remote.models import DeploymentState


class SyncResult(BaseModel):
    """Outcome of one successful deployment run."""

    project: str
    run_id: str
    deployment_id: str
    url: str | None = None
    status: DeploymentState
    stats: FolderStats
    manifest: dict[str, str] = Field(default_factory=dict)
    missing_count: int = 0
    uploaded_keys: list[str] = Field(default_factory=list)
    uploaded_bytes: int = 0
    duration_seconds: float = 0.0
