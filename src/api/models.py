# src/api/models.py - v1
"""API-level models: DeployRequest, DeployOutcome."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from pagesync.assets.models import FolderStats


class DeployRequest(BaseModel):
    """What to deploy and where."""

    project_name: str
    folder_path: Path


class DeployOutcome(BaseModel):
    """Return value of facade.deploy(): success or a structured failure."""

    success: bool
    project: str
    message: str
    deployment_id: str | None = None
    url: str | None = None
    status: str | None = None
    failed_stage: str | None = None
    error_type: str | None = None
    retryable: bool = False
    stats: FolderStats | None = None
