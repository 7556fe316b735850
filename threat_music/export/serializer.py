from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from threat_music.model.types import Layer, Payload, Project, Region, Track
from threat_music.util.naming import region_file_base

ROOT_DIR = "customMusic"
REGIONS_DIR = f"{ROOT_DIR}/regions"
SONGS_DIR = f"{ROOT_DIR}/sounds/songs"
THREAT_DIR = f"{ROOT_DIR}/sounds/threatMusic"

_LONE_SURROGATE = re.compile("[\\ud800-\\udfff]")


@dataclass(frozen=True)
class ArchiveEntry:
    path: str
    data: Payload = field(repr=False)


@dataclass
class ExportReport:
    """Lossy cases the export resolves silently.

    - missing_audio: (folder, id) pairs written to JSON without an audio file there
    - duplicate_ids: (folder, id) pairs skipped because the id was already written
    - region_collisions: region JSON paths written more than once (last wins)
    """

    missing_audio: list[tuple[str, str]] = field(default_factory=list)
    duplicate_ids: list[tuple[str, str]] = field(default_factory=list)
    region_collisions: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.missing_audio or self.duplicate_ids or self.region_collisions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "missing_audio": [list(x) for x in self.missing_audio],
            "duplicate_ids": [list(x) for x in self.duplicate_ids],
            "region_collisions": list(self.region_collisions),
        }


@dataclass(frozen=True)
class ExportPlan:
    entries: list[ArchiveEntry]
    report: ExportReport


def _layer_ids(layers: tuple[Layer, ...]) -> list[list[str]]:
    return [[t.id for t in layer] for layer in layers]


def region_to_dict(region: Region) -> dict[str, Any]:
    """Region config in export shape; key order is name, layers, nightLayers, music."""

    layers = _layer_ids(region.day_layers)
    night_layers = _layer_ids(region.night_layers)
    music = [t.id for t in region.ambient_tracks]

    out: dict[str, Any] = {"name": region.name}
    if any(layers):
        out["layers"] = layers
    if any(night_layers):
        out["nightLayers"] = night_layers
    if music:
        out["music"] = music
    return out


def region_json_text(region: Region) -> str:
    # Same bytes as JSON.stringify(obj, null, 2): no trailing newline, raw unicode,
    # lone surrogates escaped as \uXXXX so the text always encodes as UTF-8.
    text = json.dumps(region_to_dict(region), indent=2, ensure_ascii=False)
    return _LONE_SURROGATE.sub(lambda m: "\\u%04x" % ord(m.group()), text)


def region_file_name(region: Region) -> str:
    return f"{region_file_base(region.name)}.json"


class _AudioFolder:
    def __init__(self, folder: str, report: ExportReport) -> None:
        self.folder = folder
        self.report = report
        self.added: set[str] = set()

    def collect(self, tracks: Iterable[Track], out: dict[str, ArchiveEntry]) -> None:
        for t in tracks:
            if t.id in self.added:
                if t.has_payload:
                    self.report.duplicate_ids.append((self.folder, t.id))
                continue
            if not t.has_payload:
                continue
            self.added.add(t.id)
            path = f"{self.folder}/{t.id}.ogg"
            out[path] = ArchiveEntry(path=path, data=t.payload)  # type: ignore[arg-type]


def plan_export(project: Project) -> ExportPlan:
    """Build the archive entries for a project snapshot.

    Nothing here does I/O; payloads are passed through untouched for the
    archive writer to read.
    """

    report = ExportReport()
    # dict keeps first-insertion position when a later region overwrites a path
    out: dict[str, ArchiveEntry] = {}

    for r in project.regions:
        path = f"{REGIONS_DIR}/{region_file_name(r)}"
        if path in out:
            report.region_collisions.append(path)
        out[path] = ArchiveEntry(path=path, data=region_json_text(r).encode("utf-8"))

    songs = _AudioFolder(SONGS_DIR, report)
    for r in project.regions:
        songs.collect(r.ambient_tracks, out)

    threat = _AudioFolder(THREAT_DIR, report)
    for r in project.regions:
        for layer in r.day_layers:
            threat.collect(layer, out)
        for layer in r.night_layers:
            threat.collect(layer, out)

    for r in project.regions:
        threat_tracks = [t for layers in (r.day_layers, r.night_layers) for layer in layers for t in layer]
        for folder, tracks in ((songs, r.ambient_tracks), (threat, threat_tracks)):
            for t in tracks:
                key = (folder.folder, t.id)
                if t.id not in folder.added and key not in report.missing_audio:
                    report.missing_audio.append(key)

    return ExportPlan(entries=list(out.values()), report=report)


def serialize_project(project: Project) -> list[ArchiveEntry]:
    return plan_export(project).entries
