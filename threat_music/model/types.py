from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal, Union

# Opaque audio payload: raw bytes, or a file path read lazily at export time.
Payload = Union[bytes, Path]

Side = Literal["day", "night"]
SIDES: tuple[Side, ...] = ("day", "night")

_SIDE_ALIASES: dict[str, Side] = {
    "day": "day",
    "layers": "day",
    "night": "night",
    "nightlayers": "night",
}


def parse_side(value: str) -> Side:
    s = str(value).strip().lower()
    try:
        return _SIDE_ALIASES[s]
    except KeyError:
        raise ValueError(f"unknown side: {value!r} (expected day|night)") from None


@dataclass(frozen=True)
class Track:
    """An audio asset identified by its sanitized base name.

    Two tracks with the same id are the same asset on export, whatever their
    payload. A track without a payload is an id-only reference.
    """

    id: str
    payload: Payload | None = field(default=None, compare=False, repr=False)

    @property
    def has_payload(self) -> bool:
        return self.payload is not None


Layer = tuple[Track, ...]

EMPTY_LAYER: Layer = ()


@dataclass(frozen=True)
class Region:
    id: str
    name: str
    day_layers: tuple[Layer, ...] = (EMPTY_LAYER,)
    night_layers: tuple[Layer, ...] = (EMPTY_LAYER,)
    ambient_tracks: tuple[Track, ...] = ()

    def __post_init__(self) -> None:
        if not self.day_layers:
            raise ValueError("a region needs at least one day layer")
        if not self.night_layers:
            raise ValueError("a region needs at least one night layer")

    def layers(self, side: Side) -> tuple[Layer, ...]:
        return self.day_layers if side == "day" else self.night_layers

    def with_layers(self, side: Side, layers: tuple[Layer, ...]) -> "Region":
        if side == "day":
            return replace(self, day_layers=layers)
        return replace(self, night_layers=layers)

    def track_count(self) -> int:
        threat = sum(len(layer) for side in SIDES for layer in self.layers(side))
        return threat + len(self.ambient_tracks)

    def to_dict(self) -> dict[str, Any]:
        """Debug/state view; not the export format."""

        return {
            "id": self.id,
            "name": self.name,
            "layers": [[t.id for t in layer] for layer in self.day_layers],
            "nightLayers": [[t.id for t in layer] for layer in self.night_layers],
            "music": [t.id for t in self.ambient_tracks],
            "missing_payloads": sorted(
                {
                    t.id
                    for t in (*self.ambient_tracks, *_flatten(self.day_layers), *_flatten(self.night_layers))
                    if not t.has_payload
                }
            ),
        }


def _flatten(layers: tuple[Layer, ...]) -> tuple[Track, ...]:
    return tuple(t for layer in layers for t in layer)


@dataclass(frozen=True)
class Project:
    regions: tuple[Region, ...] = ()

    def find(self, region_id: str) -> Region | None:
        for r in self.regions:
            if r.id == region_id:
                return r
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "regions": [r.to_dict() for r in self.regions],
            "derived": {
                "region_count": len(self.regions),
                "track_count": sum(r.track_count() for r in self.regions),
            },
        }
