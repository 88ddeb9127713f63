# src/remote/client.py - v1
"""Async HTTP client for the remote artifact store.

Usage:
    async with PagesApiClient(base_url) as client:
        credential = await client.issue_upload_credential("my-site")
        missing = await client.check_missing(credential, keys)

Account-level calls (projects, deployments) carry the optional API token.
Content calls (check-missing, upload) carry only the upload credential
that the caller passes in; the client never stores a credential.

Responses may be wrapped in ``{"success": ..., "data"|"result": ...}``
envelopes, possibly nested; they are unwrapped before being returned.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import pydantic

from pagesync.core.errors import (
    AuthenticationError,
    NetworkError,
    RemoteServiceError,
)
from pagesync.remote.models import (
    ProjectInfo,
    UploadCredential,
    UploadPayload,
    UploadResult,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)

DEFAULT_TIMEOUT_S = 30.0

PROJECTS_PATH = "/api/pages"
CHECK_MISSING_PATH = "/api/pages/assets/check-missing"
UPLOAD_PATH = "/api/pages/assets/upload"


def _project_path(project: str, suffix: str = "") -> str:
    return f"{PROJECTS_PATH}/{quote(project, safe='')}{suffix}"


def error_message_from(body: Any, default: str) -> str:
    """Best-effort human-readable message from an error body."""
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get("message"):
                return str(first["message"])
            if isinstance(first, str):
                return first
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and value.get("message"):
                return str(value["message"])
    if isinstance(body, str) and body.strip():
        return body.strip()[:200]
    return default


def parse_model(model: type[M], body: Any, what: str) -> M:
    """Validate a decoded body into ``model``.

    Raises:
        RemoteServiceError: If the body does not fit the model.
    """
    try:
        return model.model_validate(body)
    except pydantic.ValidationError as e:
        raise RemoteServiceError(
            f"Unexpected {what} response: {e.error_count()} invalid field(s)",
            payload=body,
        ) from e


def unwrap_envelope(body: Any, status_code: int = 200) -> Any:
    """Strip ``{"success", "data"|"result"}`` envelopes.

    Raises:
        RemoteServiceError: If an envelope reports ``success: false``.
    """
    while isinstance(body, dict) and "success" in body:
        if body.get("success") is False:
            raise RemoteServiceError(
                error_message_from(body, "Remote store reported failure"),
                status_code=status_code,
                payload=body,
            )
        if "data" in body:
            body = body["data"]
        elif "result" in body:
            body = body["result"]
        else:
            break
    return body


class PagesApiClient:
    """Client for project, credential, asset and deployment operations.

    Args:
        base_url: Root URL of the remote store API.
        api_token: Optional bearer token for account-level calls.
        timeout: Default per-call timeout in seconds.
        transport: Optional httpx transport (tests inject a MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> PagesApiClient:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # --- Projects ---

    async def list_projects(self) -> list[ProjectInfo]:
        body = await self._request("GET", PROJECTS_PATH, operation="list projects")
        if body is None:
            return []
        if not isinstance(body, list):
            raise RemoteServiceError(
                "Unexpected project list response", payload=body,
            )
        return [
            parse_model(ProjectInfo, p, "project list")
            for p in body if isinstance(p, dict)
        ]

    async def get_project(self, name: str) -> ProjectInfo | None:
        """Find a project by name or id. Returns None when it does not exist."""
        try:
            projects = await self.list_projects()
        except RemoteServiceError as e:
            if e.status_code == 404:
                return None
            raise
        for project in projects:
            if project.name == name or project.id == name:
                return project
        return None

    async def create_project(self, name: str) -> ProjectInfo:
        body = await self._request(
            "POST", PROJECTS_PATH, json={"name": name}, operation="create project",
        )
        if not isinstance(body, dict):
            return ProjectInfo(name=name)
        return parse_model(ProjectInfo, {"name": name, **body}, "create project")

    # --- Content operations ---

    async def issue_upload_credential(self, project: str) -> UploadCredential:
        """Request a short-lived upload credential for ``project``.

        Raises:
            AuthenticationError: If the store returns no token.
        """
        body = await self._request(
            "GET", _project_path(project, "/upload-url"),
            operation="issue upload credential",
        )
        token = body.get("jwt") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token.strip():
            raise AuthenticationError(
                f"No upload credential issued for project '{project}'",
            )
        return UploadCredential(project=project, token=token.strip())

    async def check_missing(
        self,
        credential: UploadCredential,
        keys: Sequence[str],
        timeout: float | None = None,
    ) -> list[str]:
        """Return the keys the store reports it does not hold."""
        body = await self._request(
            "POST", CHECK_MISSING_PATH,
            json={"hashes": list(keys)},
            headers=credential.authorization_header(),
            timeout=timeout,
            operation="check missing assets",
        )
        if isinstance(body, dict) and "missing" in body:
            body = body["missing"]
        # Only an explicit empty list means nothing is missing.
        if not isinstance(body, list) or not all(isinstance(k, str) for k in body):
            raise RemoteServiceError(
                "Unexpected check-missing response", payload=body,
            )
        return body

    async def upload(
        self,
        credential: UploadCredential,
        payloads: Sequence[UploadPayload],
        timeout: float | None = None,
    ) -> UploadResult:
        body = await self._request(
            "POST", UPLOAD_PATH,
            json=[p.to_wire() for p in payloads],
            headers=credential.authorization_header(),
            timeout=timeout,
            operation="upload assets",
        )
        if not isinstance(body, dict):
            raise RemoteServiceError("Unexpected upload response", payload=body)
        return parse_model(UploadResult, body, "upload")

    # --- Deployments ---

    async def create_deployment(
        self,
        project: str,
        manifest: dict[str, str],
        timeout: float | None = None,
    ) -> dict[str, Any]:
        body = await self._request(
            "POST", _project_path(project, "/deploy"),
            json={"manifest": manifest},
            timeout=timeout,
            operation="create deployment",
        )
        if not isinstance(body, dict):
            raise RemoteServiceError("Unexpected deployment response", payload=body)
        return body

    async def get_deployment(
        self,
        project: str,
        deployment_id: str | None = None,
    ) -> dict[str, Any]:
        params = {"deploymentId": deployment_id} if deployment_id else None
        body = await self._request(
            "GET", _project_path(project, "/deployment-status"),
            params=params,
            operation="get deployment status",
        )
        if isinstance(body, dict) and isinstance(body.get("deploymentStatus"), dict):
            body = body["deploymentStatus"]
        if not isinstance(body, dict):
            raise RemoteServiceError("Unexpected deployment status response", payload=body)
        return body

    # --- Transport ---

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json: Any = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send one request and map failures onto the error taxonomy."""
        if self._client is None:
            raise RuntimeError("PagesApiClient not initialized. Use async with.")

        logger.debug("%s %s (%s)", method, path, operation)
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=headers,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.TimeoutException as e:
            raise NetworkError(f"Timed out during {operation}: {e}") from e
        except httpx.TransportError as e:
            raise NetworkError(
                f"Unable to reach remote store during {operation}: {e}",
            ) from e

        body = self._decode(response)
        status = response.status_code

        if status in (401, 403):
            raise AuthenticationError(
                f"{operation}: credential rejected ({status}): "
                + error_message_from(body, "invalid or expired credential"),
                status_code=status,
                payload=body,
            )
        if status >= 400:
            raise RemoteServiceError(
                f"{operation} failed ({status}): "
                + error_message_from(body, response.reason_phrase or "error"),
                status_code=status,
                payload=body,
            )
        if body is _UNDECODABLE:
            raise RemoteServiceError(
                f"{operation}: response is not valid JSON",
                status_code=status,
                payload=response.text[:500],
            )

        return unwrap_envelope(body, status)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            if response.status_code >= 400:
                return response.text
            return _UNDECODABLE


_UNDECODABLE = object()
