from __future__ import annotations

from collections import Counter
from random import Random

import pytest

from threat_music.edit.layers import add_layer, add_tracks, delete_layer, move_layer, move_track, remove_track
from threat_music.edit.tracks import AudioSource
from threat_music.model.types import EMPTY_LAYER, Region, Track


def _region(day: list[list[str]], night: list[list[str]] | None = None) -> Region:
    def mk(layers: list[list[str]]) -> tuple[tuple[Track, ...], ...]:
        return tuple(tuple(Track(i, i.encode()) for i in layer) for layer in layers)

    return Region(id="r", name="R", day_layers=mk(day), night_layers=mk(night or [[]]))


def _ids(region: Region, side: str = "day") -> list[list[str]]:
    return [[t.id for t in layer] for layer in region.layers(side)]  # type: ignore[arg-type]


def test_region_requires_layers_on_both_sides() -> None:
    with pytest.raises(ValueError):
        Region(id="r", name="R", day_layers=())
    with pytest.raises(ValueError):
        Region(id="r", name="R", night_layers=())


@pytest.mark.parametrize("side", ["day", "night"])
def test_add_and_delete_layer_keep_one_layer(side: str) -> None:
    r = Region(id="r", name="R")
    r = add_layer(r, side)  # type: ignore[arg-type]
    assert len(r.layers(side)) == 2  # type: ignore[arg-type]

    r = delete_layer(r, side, 0)  # type: ignore[arg-type]
    r = delete_layer(r, side, 0)  # type: ignore[arg-type]
    assert r.layers(side) == (EMPTY_LAYER,)  # type: ignore[arg-type]

    # out of range: unchanged
    assert delete_layer(r, side, 3) is r  # type: ignore[arg-type]


def test_deleting_last_nonempty_layer_leaves_one_empty_layer() -> None:
    r = _region([["a", "b"]])
    r = delete_layer(r, "day", 0)
    assert _ids(r) == [[]]


def test_layer_count_invariant_under_random_edits() -> None:
    rng = Random(7)
    r = Region(id="r", name="R")
    for _ in range(400):
        side = rng.choice(["day", "night"])
        if rng.random() < 0.45:
            r = add_layer(r, side)  # type: ignore[arg-type]
        else:
            r = delete_layer(r, side, rng.randint(-1, 5))  # type: ignore[arg-type]
        assert len(r.day_layers) >= 1
        assert len(r.night_layers) >= 1


def test_add_tracks_appends_in_input_order() -> None:
    r = _region([["x"], []])
    r = add_tracks(r, "day", 0, [AudioSource("B.ogg", b"b"), AudioSource("A.ogg", b"a")])
    assert _ids(r) == [["x", "b", "a"], []]

    night = add_tracks(r, "night", 0, [AudioSource("Siren.ogg")])
    assert _ids(night, "night") == [["siren"]]
    assert _ids(night) == _ids(r)

    assert add_tracks(r, "day", 9, [AudioSource("z.ogg")]) is r


def test_remove_track_by_position() -> None:
    r = _region([["a", "b", "c"]])
    assert _ids(remove_track(r, "day", 0, 1)) == [["a", "c"]]
    assert remove_track(r, "day", 0, 3) is r
    assert remove_track(r, "day", 1, 0) is r
    assert remove_track(r, "day", 0, -1) is r


def test_move_track_appends_to_target_end() -> None:
    r = _region([["a", "b"], ["c", "d"]])
    moved = move_track(r, "day", 1, 0, 0)
    assert _ids(moved) == [["b"], ["c", "d", "a"]]
    # input region untouched
    assert _ids(r) == [["a", "b"], ["c", "d"]]


def test_move_track_within_same_layer_goes_last() -> None:
    r = _region([["a", "b", "c"]])
    assert _ids(move_track(r, "day", 0, 0, 0)) == [["b", "c", "a"]]
    assert _ids(move_track(r, "day", 0, 0, 2)) == [["a", "b", "c"]]


def test_move_track_invalid_indices_are_noops() -> None:
    r = _region([["a"], []])
    assert move_track(r, "day", 1, 0, 5) is r
    assert move_track(r, "day", 1, 1, 0) is r
    assert move_track(r, "day", 4, 0, 0) is r
    assert move_track(r, "day", 1, -1, 0) is r


def test_move_track_preserves_track_multiset() -> None:
    rng = Random(99)
    r = _region([["a", "b", "c"], ["d"], [], ["e", "f"]])
    before = Counter(t.id for layer in r.day_layers for t in layer)
    for _ in range(300):
        n = len(r.day_layers)
        r = move_track(r, "day", rng.randrange(n), rng.randrange(n), rng.randrange(4))
        assert Counter(t.id for layer in r.day_layers for t in layer) == before
        assert r.track_count() == 6


def test_move_layer_splice_then_insert() -> None:
    r = _region([["a"], ["b"], ["c"], ["d"]])
    # forward move: target is against the shortened list
    assert _ids(move_layer(r, "day", 2, 0)) == [["b"], ["c"], ["a"], ["d"]]
    assert _ids(move_layer(r, "day", 0, 3)) == [["d"], ["a"], ["b"], ["c"]]
    # appending at len(shortened)
    assert _ids(move_layer(r, "day", 3, 1)) == [["a"], ["c"], ["d"], ["b"]]
    assert _ids(move_layer(r, "day", 1, 1)) == _ids(r)


def test_move_layer_invalid_indices_are_noops() -> None:
    r = _region([["a"], ["b"]])
    assert move_layer(r, "day", 0, 2) is r
    assert move_layer(r, "day", 2, 0) is r
    assert move_layer(r, "day", -1, 0) is r


def test_move_layer_preserves_layers_and_their_order() -> None:
    rng = Random(3)
    r = _region([["a", "b"], [], ["c"], ["d", "e", "f"]])
    before = sorted(tuple(layer) for layer in _ids(r))
    for _ in range(200):
        n = len(r.day_layers)
        r = move_layer(r, "day", rng.randrange(n), rng.randrange(n))
        assert sorted(tuple(layer) for layer in _ids(r)) == before


def test_sides_are_independent() -> None:
    r = _region([["a"], ["b"]], [["n1"], ["n2"]])
    r2 = move_layer(r, "night", 0, 1)
    assert _ids(r2, "night") == [["n2"], ["n1"]]
    assert _ids(r2) == [["a"], ["b"]]
