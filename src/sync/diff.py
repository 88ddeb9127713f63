# src/sync/diff.py - v1
"""Remote diff: which locally computed content keys does the store lack?"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pagesync.core.errors import InvalidInputError
from pagesync.remote.client import PagesApiClient
from pagesync.remote.models import UploadCredential

logger = logging.getLogger(__name__)


class RemoteDiffChecker:
    """Ask the remote store which content keys it does not hold.

    Args:
        client: Open PagesApiClient.
        timeout: Timeout for the check-missing call, in seconds.
    """

    def __init__(self, client: PagesApiClient, timeout: float | None = None) -> None:
        self._client = client
        self._timeout = timeout

    async def find_missing(
        self,
        credential: UploadCredential,
        keys: Sequence[str],
    ) -> list[str]:
        """Return the subset of ``keys`` the store reports missing.

        Keys are sent once each, in first-seen order; the result follows
        the same order. Transport and remote failures propagate; they are
        never read as "nothing missing".

        Raises:
            InvalidInputError: If ``keys`` is empty or holds a blank key.
            AuthenticationError: On 401/403.
            RemoteServiceError: On other 4xx/5xx.
            NetworkError: On transport failure.
        """
        if not keys:
            raise InvalidInputError("At least one content key is required")
        for key in keys:
            if not isinstance(key, str) or not key.strip():
                raise InvalidInputError("All content keys must be non-empty strings")

        unique = list(dict.fromkeys(keys))
        reported = await self._client.check_missing(
            credential, unique, timeout=self._timeout,
        )

        requested = set(unique)
        unknown = [k for k in reported if k not in requested]
        if unknown:
            logger.warning(
                "Remote store reported %d key(s) that were not requested; ignoring",
                len(unknown),
            )

        reported_set = set(reported)
        missing = [k for k in unique if k in reported_set]
        logger.info("%d of %d content keys missing remotely", len(missing), len(unique))
        return missing
