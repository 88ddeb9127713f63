# src/remote/models.py - v1
"""Wire models for the remote artifact store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationInfo,
    field_validator,
)

DeploymentState = Literal["queued", "building", "deploying", "success", "failure"]


class UploadCredential(BaseModel):
    """Short-lived, project-scoped token for check-missing and upload.

    The token is a SecretStr so that repr() and logging never reveal it.
    """

    model_config = ConfigDict(frozen=True)

    project: str
    token: SecretStr
    issued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token.get_secret_value()}"}


class PayloadMetadata(BaseModel):
    content_type: str = Field(alias="contentType")

    model_config = ConfigDict(populate_by_name=True)


class UploadPayload(BaseModel):
    """One asset as sent to the upload call."""

    key: str
    base64: bool = True
    value: str = Field(repr=False)
    metadata: PayloadMetadata

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class UploadResult(BaseModel):
    """Outcome of one upload batch."""

    successful_key_count: int = Field(
        default=0,
        validation_alias=AliasChoices("successful_key_count", "successCount"),
    )
    unsuccessful_keys: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("unsuccessful_keys", "unsuccessfulKeys"),
    )


class ProjectInfo(BaseModel):
    """A deployable project known to the remote store."""

    id: str = ""
    name: str
    status: str = "created"
    url: str | None = None
    created_at: str | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt", "created_on"),
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator("id", "status", mode="before")
    @classmethod
    def coerce_text(cls, v: Any, info: ValidationInfo) -> Any:
        """Stores may send numeric ids or a null status."""
        if v is None:
            return cls.model_fields[info.field_name].default
        return v if isinstance(v, str) else str(v)


class DeploymentResult(BaseModel):
    """Normalized result of creating a deployment."""

    id: str
    status: DeploymentState
    url: str | None = None
    error_message: str | None = None


class DeploymentStatus(BaseModel):
    """Normalized progress of an existing deployment."""

    id: str | None = None
    status: DeploymentState
    progress: int = 0
    logs: list[str] = Field(default_factory=list)
    url: str | None = None
    error_message: str | None = None
