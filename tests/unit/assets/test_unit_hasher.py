# tests/unit/assets/test_unit_hasher.py - v1
"""Tests for assets.hasher - content keys and guarded reads."""

from __future__ import annotations

import base64
from pathlib import Path

import pytest
from blake3 import blake3

from pagesync.assets.hasher import (
    CONTENT_KEY_LENGTH,
    compute_content_key,
    extension_of,
    read_file_bytes,
)
from pagesync.core.errors import FileTooLargeError, NotFoundError


class TestComputeContentKey:
    def test_deterministic(self):
        assert compute_content_key(b"hello", "html") == compute_content_key(b"hello", "html")

    def test_fixed_width_lowercase_hex(self):
        key = compute_content_key(b"\x00\x01binary", "png")
        assert len(key) == CONTENT_KEY_LENGTH == 32
        assert all(c in "0123456789abcdef" for c in key)

    def test_matches_blake3_of_base64_plus_extension(self):
        content = b"body { color: red; }"
        expected = blake3(
            (base64.b64encode(content).decode() + "css").encode()
        ).hexdigest()[:32]
        assert compute_content_key(content, "css") == expected

    def test_extension_is_part_of_key(self):
        assert compute_content_key(b"same", "txt") != compute_content_key(b"same", "md")

    def test_different_content_different_key(self):
        assert compute_content_key(b"a", "js") != compute_content_key(b"b", "js")

    def test_empty_content(self):
        assert len(compute_content_key(b"", "")) == CONTENT_KEY_LENGTH


class TestExtensionOf:
    @pytest.mark.parametrize("path,expected", [
        ("index.html", "html"),
        ("a/b/app.min.js", "js"),
        ("archive.tar.gz", "gz"),
        ("README", ""),
        (".env", ""),
        ("img\\Logo.PNG", "PNG"),
    ])
    def test_extension(self, path: str, expected: str):
        assert extension_of(path) == expected


class TestReadFileBytes:
    def test_reads_content(self, tmp_path: Path):
        f = tmp_path / "a.txt"
        f.write_bytes(b"abc")
        assert read_file_bytes(f, max_bytes=10) == b"abc"

    def test_at_limit_is_allowed(self, tmp_path: Path):
        f = tmp_path / "a.txt"
        f.write_bytes(b"x" * 10)
        assert len(read_file_bytes(f, max_bytes=10)) == 10

    def test_over_limit_raises(self, tmp_path: Path):
        f = tmp_path / "big.bin"
        f.write_bytes(b"x" * 11)
        with pytest.raises(FileTooLargeError) as exc_info:
            read_file_bytes(f, max_bytes=10)
        assert exc_info.value.size_bytes == 11
        assert exc_info.value.limit_bytes == 10

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(NotFoundError):
            read_file_bytes(tmp_path / "gone.txt")
