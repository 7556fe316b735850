from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

from threat_music.edit.layers import move_layer, move_track
from threat_music.model.types import Region, Side, parse_side

DRAG_TRACK = "drag/track"
DRAG_LAYER = "drag/layer"

DragKind = Literal["drag/track", "drag/layer"]


@dataclass(frozen=True)
class MoveCommand:
    """A parsed drag payload.

    `side` is the side the dragged item came from; None when the payload did
    not say (then the drop target's side is assumed).
    """

    kind: DragKind
    layer_index: int
    track_index: int | None = None
    side: Side | None = None


@dataclass(frozen=True)
class DropTarget:
    side: Side
    layer_index: int
    accept_track: bool = True
    accept_layer: bool = True


def encode_drag(kind: DragKind, side: Side, layer_index: int, track_index: int | None = None) -> str:
    payload: dict[str, Any] = {"layerIndex": int(layer_index)}
    if track_index is not None:
        payload["trackIndex"] = int(track_index)
    payload["side"] = side
    return json.dumps(payload)


def _as_index(value: Any) -> int | None:
    # bool is an int subclass; JSON true/false is not an index
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def parse_drag(kind: str | None, raw: str | dict[str, Any] | None) -> MoveCommand | None:
    """Parse a drag payload; anything malformed yields None (ignored drop)."""

    if kind not in (DRAG_TRACK, DRAG_LAYER) or raw is None:
        return None
    if isinstance(raw, dict):
        data: Any = raw
    else:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None
    if not isinstance(data, dict):
        return None

    layer_index = _as_index(data.get("layerIndex"))
    if layer_index is None:
        return None

    track_index = None
    if kind == DRAG_TRACK:
        track_index = _as_index(data.get("trackIndex"))
        if track_index is None:
            return None

    side = None
    if data.get("side") is not None:
        try:
            side = parse_side(data["side"])
        except ValueError:
            return None

    return MoveCommand(kind=kind, layer_index=layer_index, track_index=track_index, side=side)


def apply_drop(region: Region, target: DropTarget, command: MoveCommand | None) -> Region:
    """Route a drop to the matching move; unaccepted or foreign drops are ignored.

    Moves never cross sides: a payload dragged from the other side's list
    carries indices for that list and is dropped unchanged.
    """

    if command is None:
        return region
    if command.side is not None and command.side != target.side:
        return region

    if command.kind == DRAG_TRACK:
        if not target.accept_track or command.track_index is None:
            return region
        return move_track(region, target.side, target.layer_index, command.layer_index, command.track_index)

    if command.kind == DRAG_LAYER:
        if not target.accept_layer:
            return region
        return move_layer(region, target.side, target.layer_index, command.layer_index)

    return region


def handle_drop(region: Region, target: DropTarget, kind: str | None, raw: str | dict[str, Any] | None) -> Region:
    return apply_drop(region, target, parse_drag(kind, raw))
