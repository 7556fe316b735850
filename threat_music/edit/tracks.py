from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from threat_music.model.types import Payload, Track
from threat_music.util.naming import is_ogg_name, sanitize_name, strip_ogg_suffix


@dataclass(frozen=True)
class AudioSource:
    """A file handle as handed over by a drop or a file picker.

    `name` is the display name (e.g. "Forest Loop.ogg"); `payload` is whatever
    the archive writer will eventually read.
    """

    name: str
    payload: Payload | None = field(default=None, repr=False)


def source_from_path(path: str | Path) -> AudioSource:
    p = Path(path).expanduser()
    return AudioSource(name=p.name, payload=p)


def track_from_source(source: AudioSource) -> Track:
    # Extension filtering happens upstream (filter_ogg); not re-checked here.
    return Track(id=sanitize_name(strip_ogg_suffix(source.name)), payload=source.payload)


def tracks_from_sources(sources: Iterable[AudioSource]) -> tuple[Track, ...]:
    return tuple(track_from_source(s) for s in sources)


def filter_ogg(sources: Iterable[AudioSource]) -> list[AudioSource]:
    return [s for s in sources if is_ogg_name(s.name)]


def read_payload(payload: Payload) -> bytes:
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    return Path(payload).read_bytes()
