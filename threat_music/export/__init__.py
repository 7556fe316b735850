"""Pack export.

The serializer only builds entries; the writers do the byte packaging.
"""

from .serializer import ArchiveEntry, ExportPlan, ExportReport, plan_export, serialize_project
from .writers import ArchiveWriter, DirectoryArchiveWriter, ZipArchiveWriter, export_pack, save_zip

__all__ = [
    "ArchiveEntry",
    "ArchiveWriter",
    "DirectoryArchiveWriter",
    "ExportPlan",
    "ExportReport",
    "ZipArchiveWriter",
    "export_pack",
    "plan_export",
    "save_zip",
    "serialize_project",
]
