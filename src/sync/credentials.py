# src/sync/credentials.py - v1
"""Upload credential acquisition (one credential per deployment run)."""

from __future__ import annotations

import logging

from pagesync.core.errors import InvalidInputError
from pagesync.remote.client import PagesApiClient
from pagesync.remote.models import UploadCredential

logger = logging.getLogger(__name__)


class CredentialIssuer:
    """Obtain a fresh, project-scoped UploadCredential.

    The issued credential is returned to the caller and never cached here;
    each run asks for its own.
    """

    def __init__(self, client: PagesApiClient) -> None:
        self._client = client

    async def issue(self, project: str) -> UploadCredential:
        if not project or not project.strip():
            raise InvalidInputError("Project name is required")
        credential = await self._client.issue_upload_credential(project)
        logger.info("Upload credential issued for project '%s'", project)
        return credential
