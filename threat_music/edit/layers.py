"""Layer edits for either threat side of a region.

Every function is pure: it returns a new Region (or the same one when the
edit does not apply) and never touches the input. Stale or out-of-range
indices are no-ops rather than errors, since they usually come from a gesture
that raced a re-render.
"""

from __future__ import annotations

from typing import Iterable

from threat_music.edit.tracks import AudioSource, tracks_from_sources
from threat_music.model.types import EMPTY_LAYER, Layer, Region, Side


def _valid(index: int, size: int) -> bool:
    return isinstance(index, int) and 0 <= index < size


def add_layer(region: Region, side: Side) -> Region:
    return region.with_layers(side, (*region.layers(side), EMPTY_LAYER))


def delete_layer(region: Region, side: Side, layer_index: int) -> Region:
    layers = region.layers(side)
    if not _valid(layer_index, len(layers)):
        return region
    remaining = layers[:layer_index] + layers[layer_index + 1 :]
    if not remaining:
        remaining = (EMPTY_LAYER,)
    return region.with_layers(side, remaining)


def _replace_layer(region: Region, side: Side, layer_index: int, layer: Layer) -> Region:
    layers = region.layers(side)
    return region.with_layers(side, layers[:layer_index] + (layer,) + layers[layer_index + 1 :])


def add_tracks(region: Region, side: Side, layer_index: int, sources: Iterable[AudioSource]) -> Region:
    layers = region.layers(side)
    if not _valid(layer_index, len(layers)):
        return region
    new_tracks = tracks_from_sources(sources)
    if not new_tracks:
        return region
    return _replace_layer(region, side, layer_index, layers[layer_index] + new_tracks)


def remove_track(region: Region, side: Side, layer_index: int, track_index: int) -> Region:
    layers = region.layers(side)
    if not _valid(layer_index, len(layers)):
        return region
    layer = layers[layer_index]
    if not _valid(track_index, len(layer)):
        return region
    return _replace_layer(region, side, layer_index, layer[:track_index] + layer[track_index + 1 :])


def move_track(
    region: Region,
    side: Side,
    target_layer_index: int,
    from_layer_index: int,
    from_track_index: int,
) -> Region:
    """Take one track out of its layer and append it to the target layer.

    The track always lands at the end of the target, never at a drop
    position. Moving a track within its own layer sends it to the end.
    """

    layers = [list(layer) for layer in region.layers(side)]
    if not _valid(from_layer_index, len(layers)) or not _valid(target_layer_index, len(layers)):
        return region
    source = layers[from_layer_index]
    if not _valid(from_track_index, len(source)):
        return region

    moved = source.pop(from_track_index)
    layers[target_layer_index].append(moved)
    return region.with_layers(side, tuple(tuple(layer) for layer in layers))


def move_layer(region: Region, side: Side, target_index: int, from_index: int) -> Region:
    """Splice the layer at `from_index` out, then insert it at `target_index`.

    `target_index` is interpreted against the already-shortened list, so a
    caller moving a layer forward must account for the shift. Valid targets
    are 0..len(shortened) inclusive (the last value appends).
    """

    layers = list(region.layers(side))
    if not _valid(from_index, len(layers)):
        return region
    moved = layers.pop(from_index)
    if not isinstance(target_index, int) or not 0 <= target_index <= len(layers):
        return region
    layers.insert(target_index, moved)
    return region.with_layers(side, tuple(layers))
