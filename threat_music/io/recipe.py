"""Declarative pack recipes.

Minimal v1 format:

version: 1
regions:
  - name: Deep Caves
    layers:
      - [audio/drip.ogg, audio/rumble.ogg]
      - [audio/alarm.ogg]
    nightLayers:
      - [audio/night_alarm.ogg]
    music: [audio/cave_ambience.ogg]

Paths are relative to the recipe file. Entries that are not .ogg files are
dropped silently, as a file drop would drop them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from threat_music.edit.layers import add_layer, add_tracks
from threat_music.edit.music import add_music
from threat_music.edit.store import ProjectStore
from threat_music.edit.tracks import AudioSource, source_from_path
from threat_music.model.ids import IdGenerator
from threat_music.model.types import Project, Region, Side
from threat_music.util.limits import MAX_LAYERS_PER_SIDE, MAX_MUSIC_TRACKS, MAX_REGIONS, MAX_TRACKS_PER_LAYER
from threat_music.util.naming import is_ogg_name


def _as_str_list(x: Any, *, where: str) -> list[str]:
    if x is None:
        return []
    if isinstance(x, str):
        return [x]
    if not isinstance(x, (list, tuple)):
        raise ValueError(f"{where} must be a list of file paths")
    return [str(v) for v in x]


def _as_layers(x: Any, *, where: str) -> list[list[str]]:
    if x is None:
        return []
    if not isinstance(x, (list, tuple)):
        raise ValueError(f"{where} must be a list of layers")
    layers = [_as_str_list(layer, where=f"{where}[{i}]") for i, layer in enumerate(x)]
    if len(layers) > MAX_LAYERS_PER_SIDE:
        raise ValueError(f"{where}: too many layers (max {MAX_LAYERS_PER_SIDE})")
    return layers


def _sources(paths: list[str], base_dir: Path, *, where: str) -> list[AudioSource]:
    out: list[AudioSource] = []
    for raw in paths:
        if not is_ogg_name(raw):
            continue
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        if not path.is_file():
            raise ValueError(f"{where}: audio file not found: {path}")
        out.append(source_from_path(path))
    return out


def _fill_side(region: Region, side: Side, layers: list[list[str]], base_dir: Path, *, where: str) -> Region:
    for i, paths in enumerate(layers):
        if i > 0:
            region = add_layer(region, side)
        sources = _sources(paths, base_dir, where=f"{where}[{i}]")
        if len(sources) > MAX_TRACKS_PER_LAYER:
            raise ValueError(f"{where}[{i}]: too many tracks (max {MAX_TRACKS_PER_LAYER})")
        region = add_tracks(region, side, i, sources)
    return region


def project_from_recipe(data: Any, *, base_dir: Path, ids: IdGenerator | None = None) -> Project:
    if not isinstance(data, dict):
        raise ValueError("recipe must be a mapping at top-level")

    version = data.get("version", 1)
    try:
        version = int(version)
    except (TypeError, ValueError) as e:
        raise ValueError(f"expected int version, got: {version!r}") from e
    if version != 1:
        raise ValueError(f"unsupported recipe version: {version}")

    regions_raw = data.get("regions", [])
    if not isinstance(regions_raw, list):
        raise ValueError("regions must be a list")
    if len(regions_raw) > MAX_REGIONS:
        raise ValueError(f"too many regions (max {MAX_REGIONS})")

    store = ProjectStore(ids=ids)
    for idx, rd in enumerate(regions_raw):
        where = f"regions[{idx}]"
        if not isinstance(rd, dict):
            raise ValueError(f"{where} must be a mapping")

        region = store.create_region()
        name = rd.get("name")
        if name is not None:
            store.rename_region(region.id, str(name))

        day = _as_layers(rd.get("layers"), where=f"{where}.layers")
        night = _as_layers(rd.get("nightLayers"), where=f"{where}.nightLayers")
        music = _sources(_as_str_list(rd.get("music"), where=f"{where}.music"), base_dir, where=f"{where}.music")
        if len(music) > MAX_MUSIC_TRACKS:
            raise ValueError(f"{where}.music: too many tracks (max {MAX_MUSIC_TRACKS})")

        def build(r: Region) -> Region:
            r = _fill_side(r, "day", day, base_dir, where=f"{where}.layers")
            r = _fill_side(r, "night", night, base_dir, where=f"{where}.nightLayers")
            return add_music(r, music)

        store.update_region(region.id, build)

    return store.snapshot()


def load_recipe(path: str | Path, *, ids: IdGenerator | None = None) -> Project:
    p = Path(path).expanduser()
    raw = p.read_text(encoding="utf-8")

    if p.suffix.lower() in {".json"}:
        data = json.loads(raw)
    else:
        data = yaml.safe_load(raw)

    return project_from_recipe(data, base_dir=p.resolve().parent, ids=ids)
