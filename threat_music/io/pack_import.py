from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

from threat_music.edit.store import ProjectStore
from threat_music.export.serializer import ROOT_DIR, SONGS_DIR, THREAT_DIR
from threat_music.model.ids import IdGenerator
from threat_music.model.types import EMPTY_LAYER, Layer, Payload, Project, Region, Track
from threat_music.util.naming import sanitize_name

PayloadLookup = Callable[[str], Optional[Payload]]


def _no_payload(_track_id: str) -> Payload | None:
    return None


def _ids(x: Any, *, where: str) -> list[str]:
    if x is None:
        return []
    if not isinstance(x, list):
        raise ValueError(f"{where} must be a list of track ids")
    out: list[str] = []
    for i, v in enumerate(x):
        if not isinstance(v, str):
            raise ValueError(f"{where}[{i}] must be a track id string, got: {v!r}")
        # ids double as file names under sounds/; never trust them raw
        tid = sanitize_name(v)
        if tid:
            out.append(tid)
    return out


def _layers(x: Any, lookup: PayloadLookup, *, where: str) -> tuple[Layer, ...]:
    if x is None:
        return (EMPTY_LAYER,)
    if not isinstance(x, list):
        raise ValueError(f"{where} must be a list of layers")
    layers = tuple(
        tuple(Track(id=tid, payload=lookup(tid)) for tid in _ids(layer, where=f"{where}[{i}]"))
        for i, layer in enumerate(x)
    )
    return layers or (EMPTY_LAYER,)


def region_from_dict(
    d: Any,
    region_id: str,
    *,
    songs: PayloadLookup = _no_payload,
    threat: PayloadLookup = _no_payload,
) -> Region:
    """Rebuild a Region from an exported region config.

    Track ids come back as id-only references unless a lookup supplies the
    audio. Omitted layer fields come back as a single empty layer.
    """

    if not isinstance(d, dict):
        raise ValueError("region config must be a JSON object")
    return Region(
        id=region_id,
        name=str(d.get("name", "")),
        day_layers=_layers(d.get("layers"), threat, where="layers"),
        night_layers=_layers(d.get("nightLayers"), threat, where="nightLayers"),
        ambient_tracks=tuple(Track(id=tid, payload=songs(tid)) for tid in _ids(d.get("music"), where="music")),
    )


def load_region_json(text: str, region_id: str) -> Region:
    return region_from_dict(json.loads(text), region_id)


def _folder_lookup(folder: Path) -> PayloadLookup:
    def lookup(track_id: str) -> Payload | None:
        p = folder / f"{track_id}.ogg"
        return p if p.is_file() else None

    return lookup


def import_pack(root: str | Path, *, ids: IdGenerator | None = None) -> Project:
    """Load an exported pack directory (the folder holding customMusic/, or customMusic/ itself).

    Region files are read in file-name order. Audio files that exist are
    attached as lazy path payloads; the rest stay id-only.
    """

    base = Path(root).expanduser()
    if base.name != ROOT_DIR and (base / ROOT_DIR).is_dir():
        base = base / ROOT_DIR
    top = base.parent
    regions_dir = base / "regions"
    if not regions_dir.is_dir():
        raise ValueError(f"not an exported pack (missing {regions_dir})")

    songs = _folder_lookup(top / SONGS_DIR)
    threat = _folder_lookup(top / THREAT_DIR)

    store = ProjectStore(ids=ids)
    for path in sorted(regions_dir.glob("*.json")):
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise ValueError(f"{path.name}: invalid JSON ({e})") from e
        try:
            region = region_from_dict(data, store.new_region_id(), songs=songs, threat=threat)
        except ValueError as e:
            raise ValueError(f"{path.name}: {e}") from e
        store.add_region(region)
    return store.snapshot()
