from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Any, Protocol

from threat_music.edit.tracks import read_payload
from threat_music.export.serializer import plan_export
from threat_music.model.types import Project

DEFAULT_ARCHIVE_NAME = "customMusic.zip"


class ArchiveWriter(Protocol):
    def add_file(self, path: str, data: bytes) -> None: ...

    def finalize(self) -> Any: ...


class ZipArchiveWriter:
    """Collects files in memory and packs them into a zip on finalize().

    Adding a path twice replaces the earlier content (zip itself would keep
    both members).
    """

    def __init__(self, *, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self.compression = compression
        self._files: dict[str, bytes] = {}

    def add_file(self, path: str, data: bytes) -> None:
        self._files[path] = bytes(data)

    def finalize(self) -> bytes:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", compression=self.compression) as zf:
            dirs_written: set[str] = set()
            for path, data in self._files.items():
                parts = path.split("/")[:-1]
                for i in range(1, len(parts) + 1):
                    d = "/".join(parts[:i]) + "/"
                    if d not in dirs_written:
                        dirs_written.add(d)
                        zf.writestr(d, b"")
                zf.writestr(path, data)
        return buf.getvalue()


class DirectoryArchiveWriter:
    """Writes the archive tree straight to a directory (unpacked export)."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()

    def add_file(self, path: str, data: bytes) -> None:
        out = self.root / path
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(data)

    def finalize(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root


def export_pack(project: Project, writer: ArchiveWriter) -> Any:
    for entry in plan_export(project).entries:
        writer.add_file(entry.path, read_payload(entry.data))
    return writer.finalize()


def save_zip(project: Project, out_path: str | Path | None = None) -> Path:
    out = Path(out_path or DEFAULT_ARCHIVE_NAME).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(export_pack(project, ZipArchiveWriter()))
    return out
