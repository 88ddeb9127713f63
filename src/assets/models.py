# src/assets/models.py - v1
"""Local asset models: FileRecord, Manifest, FolderStats."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field


class FileRecord(BaseModel):
    """One hashed file of the site, scoped to a single run."""

    model_config = ConfigDict(frozen=True)

    logical_path: str
    content: bytes = Field(repr=False)
    content_key: str
    content_type: str
    extension: str = ""
    size_bytes: int = 0


class FolderStats(BaseModel):
    """Summary of a scanned folder."""

    total_files: int = 0
    total_size: int = 0
    file_types: dict[str, int] = Field(default_factory=dict)


class Manifest(BaseModel):
    """Desired state of one deployment: logical path -> content key.

    ``records`` holds one FileRecord per manifest entry, in scan order.
    """

    entries: dict[str, str] = Field(default_factory=dict)
    records: list[FileRecord] = Field(default_factory=list)
    duplicates: list[str] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self) -> list[str]:
        """Unique content keys in first-seen order."""
        return list(dict.fromkeys(self.entries.values()))

    def records_for(self, keys: Iterable[str]) -> list[FileRecord]:
        """Records whose content key is in ``keys``."""
        wanted = set(keys)
        return [r for r in self.records if r.content_key in wanted]

    @property
    def total_size(self) -> int:
        return sum(r.size_bytes for r in self.records)
