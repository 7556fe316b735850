from __future__ import annotations

import io
import json
import zipfile
from pathlib import Path

import pytest

from threat_music.cli.headless import HeadlessRunner
from threat_music.model.ids import CounterIds


def _audio(d: Path, *names: str) -> None:
    d.mkdir(parents=True, exist_ok=True)
    for n in names:
        (d / n).write_bytes(n.encode())


def test_headless_builds_and_exports_zip(tmp_path: Path) -> None:
    _audio(tmp_path / "audio", "Forest Loop.ogg", "Alert 1.OGG", "Howl.ogg", "cover.png")
    script = [
        "# one region, default name",
        "new_region",
        'add_music 0 "audio/Forest Loop.ogg"',
        'add_tracks 0 day 0 "audio/Alert 1.OGG" audio/cover.png',
        "add_layer 0 night",
        "add_tracks 0 night 1 audio/Howl.ogg",
        "export_zip out/customMusic.zip",
        "dump_state out/state.json",
    ]

    r = HeadlessRunner(strict=True, ids=CounterIds())
    r.run_lines(script, base_dir=tmp_path)

    zf = zipfile.ZipFile(io.BytesIO((tmp_path / "out" / "customMusic.zip").read_bytes()))
    assert json.loads(zf.read("customMusic/regions/region_0.json")) == {
        "name": "Region 0",
        "layers": [["alert_1"]],
        "nightLayers": [[], ["howl"]],
        "music": ["forest_loop"],
    }
    assert zf.read("customMusic/sounds/songs/forest_loop.ogg") == b"Forest Loop.ogg"
    assert zf.read("customMusic/sounds/threatMusic/alert_1.ogg") == b"Alert 1.OGG"

    state = json.loads((tmp_path / "out" / "state.json").read_text(encoding="utf-8"))
    assert state["regions"][0]["id"] == "region-1"
    assert state["derived"]["track_count"] == 3
    assert state["export"]["missing_audio"] == []
    assert r.commands_executed == 7


def test_headless_moves_drops_and_region_edits(tmp_path: Path) -> None:
    _audio(tmp_path, "a.ogg", "b.ogg", "c.ogg")
    script = [
        "new_region Caves",
        "new_region Forest",
        "add_layer 0 day",
        "add_tracks 0 day 0 a.ogg b.ogg",
        "add_tracks 0 day 1 c.ogg",
        "move_track 0 day 1 0 0",
        "move_layer 0 day 0 1",
        """drop 0 day 0 drag/track '{"layerIndex": 0, "trackIndex": 0}'""",
        """drop 0 day 0 drag/layer '{"layerIndex": 0, "side": "night"}'""",
        "rename_region 1 Dark Forest",
        "delete_region 1",
        f"dump_state {tmp_path / 'state.json'}",
    ]
    r = HeadlessRunner(strict=True, ids=CounterIds())
    r.run_lines(script, base_dir=tmp_path)

    regions = r.store.regions()
    assert [x.name for x in regions] == ["Caves"]
    # [[a,b],[c]] -> move a to layer1 -> [[b],[c,a]] -> layer1 first -> [[c,a],[b]]
    # -> drop track (0,0) on layer 0 -> [[a,c],[b]]; cross-side layer drop ignored
    assert [[t.id for t in layer] for layer in regions[0].day_layers] == [["a", "c"], ["b"]]


def test_strict_mode_raises_with_line_number() -> None:
    r = HeadlessRunner(strict=True)
    with pytest.raises(RuntimeError, match="line 2"):
        r.run_lines(["new_region", "rename_region 3 X"])


def test_non_strict_mode_collects_warnings() -> None:
    r = HeadlessRunner(strict=False)
    r.run_lines(["frobnicate", "new_region", "delete_layer 0 dusk 0"])
    assert len(r.warnings) == 2
    assert "Unknown command" in r.warnings[0]
    assert len(r.store.regions()) == 1


def test_include_and_dry_run_export(tmp_path: Path) -> None:
    inc = tmp_path / "inc.txt"
    inc.write_text("new_region Included\n", encoding="utf-8")
    r = HeadlessRunner(strict=True, dry_run=True)
    r.run_lines([f"include {inc.name}", "export_dir out"], base_dir=tmp_path)
    assert [x.name for x in r.store.regions()] == ["Included"]
    assert r.ctx.exports == [str(tmp_path / "out")]
    assert not (tmp_path / "out").exists()


def test_load_recipe_command_and_event_log(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr("threat_music.util.state_log.default_config_dir", lambda: tmp_path / "cfg")
    _audio(tmp_path / "audio", "drip.ogg")
    (tmp_path / "pack.yaml").write_text(
        "regions:\n  - name: Caves\n    layers: [[audio/drip.ogg]]\n", encoding="utf-8"
    )
    r = HeadlessRunner(strict=True, log_events=True)
    r.run_lines(["load_recipe pack.yaml", "export_dir unpacked"], base_dir=tmp_path)

    assert (tmp_path / "unpacked" / "customMusic" / "sounds" / "threatMusic" / "drip.ogg").exists()
    lines = (tmp_path / "cfg" / "events.jsonl").read_text(encoding="utf-8").splitlines()
    ev = json.loads(lines[-1])
    assert ev["event"] == "export_dir"
    assert ev["regions"] == 1
    assert ev["missing_audio"] == []


def test_moves_respect_track_cap(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr("threat_music.cli.headless.MAX_TRACKS_PER_LAYER", 1)
    _audio(tmp_path, "a.ogg", "b.ogg")
    r = HeadlessRunner(strict=False)
    r.run_lines(
        [
            "new_region",
            "add_layer 0 day",
            "add_tracks 0 day 0 a.ogg",
            "add_tracks 0 day 1 b.ogg",
            "move_track 0 day 1 0 0",
            """drop 0 day 0 drag/track '{"layerIndex": 1, "trackIndex": 0}'""",
            "move_track 0 day 0 0 0",
        ],
        base_dir=tmp_path,
    )
    assert len(r.warnings) == 2
    assert all("max tracks per layer" in w for w in r.warnings)
    # same-layer move stays allowed at the cap
    assert [[t.id for t in layer] for layer in r.store.regions()[0].day_layers] == [["a"], ["b"]]
