# src/sync/submitter.py - v1
"""Deployment submission: ensure the project exists, then publish a manifest."""

from __future__ import annotations

import logging

from pagesync.core.errors import InvalidInputError, RemoteServiceError
from pagesync.remote.client import PagesApiClient
from pagesync.remote.models import DeploymentResult, DeploymentStatus, ProjectInfo
from pagesync.remote.status import to_deployment_result, to_deployment_status

logger = logging.getLogger(__name__)


def _already_exists(error: RemoteServiceError) -> bool:
    return error.status_code == 409 or "already exist" in str(error).lower()


class DeploymentSubmitter:
    """Create deployments from a completed manifest.

    Performs no retries: a failed submission propagates to the caller, who
    can re-run the whole pipeline.

    Args:
        client: Open PagesApiClient.
        timeout: Timeout for the create-deployment call, in seconds.
    """

    def __init__(self, client: PagesApiClient, timeout: float | None = None) -> None:
        self._client = client
        self._timeout = timeout

    async def ensure_project(self, name: str) -> ProjectInfo:
        """Return the project, creating it first when absent.

        A create that fails because the project already exists is success.
        """
        if not name or not name.strip():
            raise InvalidInputError("Project name is required")

        existing = await self._client.get_project(name)
        if existing is not None:
            logger.info("Project '%s' already exists", name)
            return existing

        logger.info("Project '%s' does not exist, creating", name)
        try:
            created = await self._client.create_project(name)
        except RemoteServiceError as e:
            if not _already_exists(e):
                raise
            logger.info("Project '%s' was created concurrently", name)
            return await self._client.get_project(name) or ProjectInfo(name=name)

        logger.info("Project '%s' created", name)
        return created

    async def submit(self, name: str, manifest: dict[str, str]) -> DeploymentResult:
        """Submit ``manifest`` and return the normalized deployment result.

        Raises:
            InvalidInputError: If the manifest is empty.
            RemoteServiceError: If the store rejects the deployment or
                returns no deployment id.
        """
        if not manifest:
            raise InvalidInputError("Cannot deploy an empty manifest")

        raw = await self._client.create_deployment(name, manifest, timeout=self._timeout)
        result = to_deployment_result(raw)
        if not result.id:
            raise RemoteServiceError(
                f"Deployment for '{name}' returned no id (status {result.status})",
                payload=raw,
            )

        if result.status == "failure":
            logger.error(
                "Deployment %s for '%s' failed: %s", result.id, name, result.error_message,
            )
        else:
            logger.info(
                "Deployment %s for '%s' submitted (%s)", result.id, name, result.status,
            )
        return result

    async def get_status(
        self,
        name: str,
        deployment_id: str | None = None,
    ) -> DeploymentStatus:
        """Status of a deployment, or of the latest one when no id is given."""
        raw = await self._client.get_deployment(name, deployment_id)
        return to_deployment_status(raw)
