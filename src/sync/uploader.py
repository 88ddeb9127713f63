# src/sync/uploader.py - v1
"""Upload batcher: send only the content the remote store lacks.

Payloads are validated before anything is sent, and the whole batch goes
out in one call. Any key the store reports as unsuccessful fails the run:
a manifest must never reference content the store does not hold.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from pagesync.assets.models import FileRecord
from pagesync.core.errors import InvalidInputError, PartialUploadFailure, ValidationError
from pagesync.remote.client import PagesApiClient
from pagesync.remote.models import PayloadMetadata, UploadCredential, UploadPayload

logger = logging.getLogger(__name__)


@dataclass
class UploadReport:
    """What an upload step did."""

    uploaded_keys: list[str] = field(default_factory=list)
    successful_count: int = 0
    uploaded_bytes: int = 0
    skipped: bool = False


def build_payloads(
    records: Sequence[FileRecord],
    missing: Sequence[str],
) -> list[UploadPayload]:
    """One payload per missing key, in ``missing`` order.

    Raises:
        InvalidInputError: If a missing key has no local record.
    """
    by_key: dict[str, FileRecord] = {}
    for record in records:
        by_key.setdefault(record.content_key, record)

    payloads: list[UploadPayload] = []
    for key in dict.fromkeys(missing):
        record = by_key.get(key)
        if record is None:
            raise InvalidInputError(f"No local file for missing content key {key}")
        payloads.append(
            UploadPayload(
                key=record.content_key,
                base64=True,
                value=base64.b64encode(record.content).decode("ascii"),
                metadata=PayloadMetadata(content_type=record.content_type),
            )
        )
    return payloads


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_payloads(payloads: Sequence[UploadPayload]) -> None:
    """Check every payload field before sending.

    Raises:
        ValidationError: On the first invalid payload.
    """
    if not payloads:
        raise ValidationError("At least one upload payload is required")
    for index, payload in enumerate(payloads):
        if payload.base64 is not True:
            raise ValidationError(f"Payload {index}: base64 must be true")
        if _is_blank(payload.key):
            raise ValidationError(f"Payload {index}: key must be a non-empty string")
        if _is_blank(payload.value):
            raise ValidationError(
                f"Payload {index} ({payload.key}): value must be a non-empty string"
            )
        if _is_blank(payload.metadata.content_type):
            raise ValidationError(
                f"Payload {index} ({payload.key}): metadata.contentType must be a non-empty string"
            )


class UploadBatcher:
    """Upload missing content in a single batch.

    Args:
        client: Open PagesApiClient.
        timeout: Timeout for the upload call, in seconds. Should exceed the
            check-missing timeout since payloads can be large.
    """

    def __init__(self, client: PagesApiClient, timeout: float | None = None) -> None:
        self._client = client
        self._timeout = timeout

    async def upload_missing(
        self,
        credential: UploadCredential,
        records: Sequence[FileRecord],
        missing: Sequence[str],
    ) -> UploadReport:
        """Upload the records whose key is in ``missing``.

        No call is made when ``missing`` is empty.

        Raises:
            ValidationError: If a payload is malformed (before sending).
            PartialUploadFailure: If the store reports unsuccessful keys.
        """
        if not missing:
            logger.info("No new assets to upload")
            return UploadReport(skipped=True)

        payloads = build_payloads(records, missing)
        validate_payloads(payloads)

        sizes = {r.content_key: r.size_bytes for r in records}
        uploaded_bytes = sum(sizes[p.key] for p in payloads)
        logger.info(
            "Uploading %d asset(s), %d bytes", len(payloads), uploaded_bytes,
        )

        result = await self._client.upload(credential, payloads, timeout=self._timeout)

        if result.unsuccessful_keys:
            raise PartialUploadFailure(
                result.unsuccessful_keys, result.successful_key_count,
            )

        if result.successful_key_count != len(payloads):
            logger.warning(
                "Upload reported %d stored keys for %d payloads",
                result.successful_key_count, len(payloads),
            )

        return UploadReport(
            uploaded_keys=[p.key for p in payloads],
            successful_count=result.successful_key_count,
            uploaded_bytes=uploaded_bytes,
        )
