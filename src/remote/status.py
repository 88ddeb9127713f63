# src/remote/status.py - v1
"""Map the remote store's deployment/stage vocabulary onto DeploymentState."""

from __future__ import annotations

from typing import Any

from pagesync.remote.models import DeploymentResult, DeploymentState, DeploymentStatus

_STATUS_MAP: dict[str, DeploymentState] = {
    "success": "success",
    "failure": "failure",
    "canceled": "failure",
    "active": "building",
    "building": "building",
    "deploying": "deploying",
    "queued": "queued",
}

_PROGRESS: dict[DeploymentState, int] = {
    "queued": 0,
    "building": 50,
    "deploying": 80,
    "success": 100,
    "failure": 100,
}

DEFAULT_FAILURE_MESSAGE = "Deployment failed"


def normalize_status(raw: str | None) -> DeploymentState:
    """Normalize a raw stage status. Unknown or missing values are 'queued'."""
    if not raw:
        return "queued"
    return _STATUS_MAP.get(raw.strip().lower(), "queued")


def raw_status_of(deployment: dict[str, Any]) -> str | None:
    """Raw status of a deployment, preferring ``latest_stage.status``."""
    stage = deployment.get("latest_stage")
    if isinstance(stage, dict) and stage.get("status"):
        return str(stage["status"])
    status = deployment.get("status")
    return str(status) if status else None


def _failure_message(deployment: dict[str, Any]) -> str:
    for key in ("error_message", "errorMessage", "message"):
        value = deployment.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return DEFAULT_FAILURE_MESSAGE


def to_deployment_result(deployment: dict[str, Any]) -> DeploymentResult:
    """Build a DeploymentResult from a raw deployment object."""
    status = normalize_status(raw_status_of(deployment))
    return DeploymentResult(
        id=str(deployment.get("id") or ""),
        status=status,
        url=deployment.get("url") or None,
        error_message=_failure_message(deployment) if status == "failure" else None,
    )


def to_deployment_status(deployment: dict[str, Any]) -> DeploymentStatus:
    """Build a DeploymentStatus (with progress and stage logs)."""
    status = normalize_status(raw_status_of(deployment))

    logs: list[str] = []
    stages = deployment.get("stages")
    if isinstance(stages, list):
        for stage in stages:
            if isinstance(stage, dict):
                logs.append(
                    f"{stage.get('name')}: {stage.get('status')} ({stage.get('started_on')})"
                )

    return DeploymentStatus(
        id=deployment.get("id") or None,
        status=status,
        progress=_PROGRESS[status],
        logs=logs,
        url=deployment.get("url") or None,
        error_message=_failure_message(deployment) if status == "failure" else None,
    )
