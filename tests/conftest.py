# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides a sample site tree and an in-memory fake of the remote artifact
store served through httpx.MockTransport. No network access.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio

from pagesync.config.settings import Settings
from pagesync.remote.client import PagesApiClient
from pagesync.remote.models import UploadCredential

BASE_URL = "https://store.test"
TOKEN = "jwt-secret-token"


# === Fake remote store ===


@dataclass
class FakeStore:
    """In-memory remote artifact store speaking the proxy API."""

    token: str = TOKEN
    projects: dict[str, dict[str, Any]] = field(default_factory=dict)
    stored: dict[str, dict[str, Any]] = field(default_factory=dict)
    deployments: list[dict[str, Any]] = field(default_factory=list)
    calls: list[tuple[str, str]] = field(default_factory=list)
    fail_keys: set[str] = field(default_factory=set)
    deploy_stage_status: str = "success"
    overrides: dict[str, httpx.Response] = field(default_factory=dict)
    raise_on: dict[str, Exception] = field(default_factory=dict)

    def count(self, name: str) -> int:
        return sum(1 for _, n in self.calls if n == name)

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = self._route(request)
        self.calls.append((request.method, name))
        if name in self.raise_on:
            raise self.raise_on[name]
        if name in self.overrides:
            return self.overrides[name]
        return getattr(self, f"_handle_{name}")(request)

    @staticmethod
    def _route(request: httpx.Request) -> str:
        path = request.url.path
        if path == "/api/pages/assets/check-missing":
            return "check_missing"
        if path == "/api/pages/assets/upload":
            return "upload"
        if path == "/api/pages":
            return "list_projects" if request.method == "GET" else "create_project"
        if path.endswith("/upload-url"):
            return "upload_url"
        if path.endswith("/deploy"):
            return "deploy"
        if path.endswith("/deployment-status"):
            return "deployment_status"
        raise AssertionError(f"unexpected request {request.method} {path}")

    def _authorized(self, request: httpx.Request) -> bool:
        return request.headers.get("Authorization") == f"Bearer {self.token}"

    @staticmethod
    def _ok(data: Any) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "data": data})

    def _handle_list_projects(self, request: httpx.Request) -> httpx.Response:
        return self._ok(list(self.projects.values()))

    def _handle_create_project(self, request: httpx.Request) -> httpx.Response:
        name = json.loads(request.content)["name"]
        if name in self.projects:
            return httpx.Response(
                409, json={"success": False, "message": "Project already exists"},
            )
        project = {"id": f"id-{name}", "name": name, "status": "created"}
        self.projects[name] = project
        return self._ok(project)

    def _handle_upload_url(self, request: httpx.Request) -> httpx.Response:
        return self._ok({"jwt": self.token})

    def _handle_check_missing(self, request: httpx.Request) -> httpx.Response:
        if not self._authorized(request):
            return httpx.Response(401, json={"success": False, "message": "bad jwt"})
        hashes = json.loads(request.content)["hashes"]
        missing = [h for h in hashes if h not in self.stored]
        return self._ok({"result": missing, "success": True})

    def _handle_upload(self, request: httpx.Request) -> httpx.Response:
        if not self._authorized(request):
            return httpx.Response(401, json={"success": False, "message": "bad jwt"})
        payload = json.loads(request.content)
        failed = [p["key"] for p in payload if p["key"] in self.fail_keys]
        for item in payload:
            if item["key"] not in self.fail_keys:
                self.stored[item["key"]] = item
        return self._ok({
            "result": {
                "successful_key_count": len(payload) - len(failed),
                "unsuccessful_keys": failed,
            },
            "success": True,
        })

    def _handle_deploy(self, request: httpx.Request) -> httpx.Response:
        manifest = json.loads(request.content)["manifest"]
        deployment = {
            "id": f"dep-{len(self.deployments) + 1}",
            "url": f"https://dep-{len(self.deployments) + 1}.example.dev",
            "latest_stage": {"name": "deploy", "status": self.deploy_stage_status},
            "manifest": manifest,
        }
        self.deployments.append(deployment)
        return self._ok(deployment)

    def _handle_deployment_status(self, request: httpx.Request) -> httpx.Response:
        if not self.deployments:
            return httpx.Response(
                400, json={"success": False, "message": "No deployments found"},
            )
        wanted = request.url.params.get("deploymentId")
        for deployment in self.deployments:
            if wanted is None or deployment["id"] == wanted:
                return self._ok({"deploymentStatus": deployment})
        return httpx.Response(404, json={"success": False, "message": "not found"})


# === FIXTURES ===


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def transport(fake_store: FakeStore) -> httpx.MockTransport:
    return httpx.MockTransport(fake_store.handler)


@pytest_asyncio.fixture
async def api_client(transport: httpx.MockTransport):
    async with PagesApiClient(BASE_URL, transport=transport) as client:
        yield client


@pytest.fixture
def credential() -> UploadCredential:
    return UploadCredential(project="demo", token=TOKEN)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, api_base_url=BASE_URL, hash_workers=4)


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """Scenario A site: index.html (content X) and style.css (content Y)."""
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_bytes(b"<html><body>Hello</body></html>")
    (root / "style.css").write_bytes(b"body { color: red; }")
    return root


@pytest.fixture
def make_tree(tmp_path: Path):
    """Factory: create files (relative path -> content) under a fresh root."""

    def _make(files: dict[str, bytes], name: str = "tree") -> Path:
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        return root

    return _make
