# tests/unit/remote/test_unit_status.py - v1
"""Tests for remote.status - deployment status normalization."""

from __future__ import annotations

import pytest

from pagesync.remote.status import (
    DEFAULT_FAILURE_MESSAGE,
    normalize_status,
    to_deployment_result,
    to_deployment_status,
)


class TestNormalizeStatus:
    @pytest.mark.parametrize("raw,expected", [
        ("success", "success"),
        ("failure", "failure"),
        ("canceled", "failure"),
        ("active", "building"),
        ("building", "building"),
        ("deploying", "deploying"),
        ("idle", "queued"),
        ("", "queued"),
        (None, "queued"),
        ("SUCCESS", "success"),
    ])
    def test_mapping(self, raw, expected):
        assert normalize_status(raw) == expected


class TestToDeploymentResult:
    def test_latest_stage_preferred(self):
        result = to_deployment_result({
            "id": "d1",
            "url": "https://d1.example.dev",
            "status": "queued",
            "latest_stage": {"status": "success"},
        })
        assert result.id == "d1"
        assert result.status == "success"
        assert result.url == "https://d1.example.dev"
        assert result.error_message is None

    def test_already_normalized_body(self):
        result = to_deployment_result({"id": "d2", "status": "building"})
        assert result.status == "building"
        assert result.url is None

    def test_failure_has_message(self):
        result = to_deployment_result({"id": "d3", "latest_stage": {"status": "failure"}})
        assert result.status == "failure"
        assert result.error_message == DEFAULT_FAILURE_MESSAGE

    def test_failure_keeps_remote_message(self):
        result = to_deployment_result({
            "id": "d4", "status": "failure", "errorMessage": "build exploded",
        })
        assert result.error_message == "build exploded"


class TestToDeploymentStatus:
    def test_progress_and_logs(self):
        status = to_deployment_status({
            "id": "d1",
            "latest_stage": {"status": "deploying"},
            "stages": [
                {"name": "queued", "status": "success", "started_on": "t0"},
                {"name": "deploy", "status": "active", "started_on": "t1"},
            ],
        })
        assert status.status == "deploying"
        assert status.progress == 80
        assert status.logs == ["queued: success (t0)", "deploy: active (t1)"]

    @pytest.mark.parametrize("raw,progress", [
        ("queued", 0), ("building", 50), ("success", 100), ("failure", 100),
    ])
    def test_progress_values(self, raw, progress):
        assert to_deployment_status({"status": raw}).progress == progress
