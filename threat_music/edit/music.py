from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from threat_music.edit.tracks import AudioSource, tracks_from_sources
from threat_music.model.types import Region


def add_music(region: Region, sources: Iterable[AudioSource]) -> Region:
    new_tracks = tracks_from_sources(sources)
    if not new_tracks:
        return region
    return replace(region, ambient_tracks=region.ambient_tracks + new_tracks)


def remove_music(region: Region, index: int) -> Region:
    tracks = region.ambient_tracks
    if not isinstance(index, int) or not 0 <= index < len(tracks):
        return region
    return replace(region, ambient_tracks=tracks[:index] + tracks[index + 1 :])
