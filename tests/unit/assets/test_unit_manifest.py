# tests/unit/assets/test_unit_manifest.py - v1
"""Tests for assets.manifest - concurrent hashing and manifest assembly."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from pagesync.assets.hasher import compute_content_key
from pagesync.assets.manifest import (
    ManifestBuilder,
    assemble_manifest,
    compute_folder_stats,
    hash_file,
    normalize_logical_path,
)
from pagesync.assets.mime import DEFAULT_CONTENT_TYPE, content_type_for
from pagesync.core.errors import DeploymentCancelled, FileTooLargeError


class TestNormalizeLogicalPath:
    @pytest.mark.parametrize("raw,expected", [
        ("index.html", "/index.html"),
        ("/index.html", "/index.html"),
        ("//a//b.css", "/a/b.css"),
        ("img\\logo.png", "/img/logo.png"),
    ])
    def test_single_leading_separator(self, raw: str, expected: str):
        assert normalize_logical_path(raw) == expected


class TestContentType:
    def test_known_extensions(self):
        assert content_type_for("html") == "text/html"
        assert content_type_for(".CSS") == "text/css"
        assert content_type_for("woff2") == "font/woff2"

    def test_unknown_defaults_to_binary(self):
        assert content_type_for("xyz") == DEFAULT_CONTENT_TYPE
        assert content_type_for("") == DEFAULT_CONTENT_TYPE


class TestHashFile:
    def test_record_fields(self, site_dir: Path):
        record = hash_file(site_dir, "index.html")
        content = (site_dir / "index.html").read_bytes()
        assert record.logical_path == "/index.html"
        assert record.content == content
        assert record.content_key == compute_content_key(content, "html")
        assert record.content_type == "text/html"
        assert record.extension == "html"
        assert record.size_bytes == len(content)

    def test_record_is_immutable(self, site_dir: Path):
        record = hash_file(site_dir, "index.html")
        with pytest.raises(Exception):
            record.content_key = "other"  # type: ignore[misc]


class TestAssembleManifest:
    def test_later_duplicate_wins(self, make_tree):
        root = make_tree({"a.txt": b"first", "b.txt": b"second"})
        first = hash_file(root, "a.txt")
        second = hash_file(root, "b.txt").model_copy(update={"logical_path": "/a.txt"})

        manifest = assemble_manifest([first, second])

        assert manifest.entries == {"/a.txt": second.content_key}
        assert manifest.duplicates == ["/a.txt"]
        assert len(manifest.records) == 1


class TestManifestBuilder:
    @pytest.mark.asyncio
    async def test_build_maps_paths_to_keys(self, site_dir: Path):
        manifest = await ManifestBuilder().build(site_dir, ["index.html", "style.css"])
        assert manifest.entries == {
            "/index.html": compute_content_key((site_dir / "index.html").read_bytes(), "html"),
            "/style.css": compute_content_key((site_dir / "style.css").read_bytes(), "css"),
        }
        assert [r.logical_path for r in manifest.records] == ["/index.html", "/style.css"]

    @pytest.mark.asyncio
    async def test_identical_content_shares_key(self, make_tree):
        root = make_tree({"a/logo.png": b"PNGDATA", "b/logo.png": b"PNGDATA"})
        manifest = await ManifestBuilder().build(root, ["a/logo.png", "b/logo.png"])
        assert manifest.entries["/a/logo.png"] == manifest.entries["/b/logo.png"]
        assert len(manifest.keys()) == 1
        assert len(manifest.records) == 2

    @pytest.mark.asyncio
    async def test_records_for_selects_by_key(self, site_dir: Path):
        manifest = await ManifestBuilder().build(site_dir, ["index.html", "style.css"])
        css_key = manifest.entries["/style.css"]
        assert [r.logical_path for r in manifest.records_for([css_key])] == ["/style.css"]
        assert manifest.total_size == sum(r.size_bytes for r in manifest.records)

    @pytest.mark.asyncio
    async def test_many_files_with_small_pool(self, make_tree):
        files = {f"page{i}.html": f"<p>{i}</p>".encode() for i in range(25)}
        root = make_tree(files)
        manifest = await ManifestBuilder(max_workers=2).build(root, sorted(files))
        assert len(manifest) == 25
        assert list(manifest.entries) == [f"/{name}" for name in sorted(files)]

    @pytest.mark.asyncio
    async def test_size_guard(self, make_tree):
        root = make_tree({"small.txt": b"ok", "big.bin": b"x" * 2048})
        builder = ManifestBuilder(max_file_size_bytes=1024)
        with pytest.raises(FileTooLargeError):
            await builder.build(root, ["big.bin", "small.txt"])

    @pytest.mark.asyncio
    async def test_cancel_event_stops_hashing(self, site_dir: Path):
        event = asyncio.Event()
        event.set()
        with pytest.raises(DeploymentCancelled):
            await ManifestBuilder().build(site_dir, ["index.html"], cancel_event=event)

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            ManifestBuilder(max_workers=0)


class TestFolderStats:
    def test_histogram_and_totals(self, make_tree):
        root = make_tree({"a.html": b"12", "b.html": b"345", "c.css": b"6", "LICENSE": b"78"})
        stats = compute_folder_stats(root, ["a.html", "b.html", "c.css", "LICENSE"])
        assert stats.total_files == 4
        assert stats.total_size == 8
        assert stats.file_types == {"html": 2, "css": 1, "no-extension": 1}
