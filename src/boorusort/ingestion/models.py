"""Ingestion data models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class PendingFile(BaseModel):
    """An image discovered in the source directory, awaiting identification.

    Attributes:
        path: Absolute path of the file.
        size_bytes: File size at discovery time.
        mime_type: Detected MIME type.
    """

    path: Path
    size_bytes: int
    mime_type: str


class FileDescriptor(BaseModel):
    """A discovered file together with its content hash."""

    path: Path
    size_bytes: int
    mime_type: str
    hash: str

    @classmethod
    def from_pending(cls, pending: PendingFile, file_hash: str) -> "FileDescriptor":
        return cls(
            path=pending.path,
            size_bytes=pending.size_bytes,
            mime_type=pending.mime_type,
            hash=file_hash,
        )

    @property
    def display_name(self) -> str:
        return self.path.name


__all__ = ["PendingFile", "FileDescriptor"]
