from __future__ import annotations

import json
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from threat_music.edit import layers as layer_ops
from threat_music.edit.drag import DRAG_TRACK, DropTarget, apply_drop, parse_drag
from threat_music.edit.music import add_music, remove_music
from threat_music.edit.store import ProjectStore
from threat_music.edit.tracks import AudioSource, filter_ogg, source_from_path
from threat_music.export.serializer import plan_export
from threat_music.export.writers import DEFAULT_ARCHIVE_NAME, DirectoryArchiveWriter, export_pack, save_zip
from threat_music.io.pack_import import import_pack
from threat_music.io.recipe import load_recipe
from threat_music.model.ids import IdGenerator
from threat_music.model.types import Region, Side, parse_side
from threat_music.util.limits import MAX_LAYERS_PER_SIDE, MAX_MUSIC_TRACKS, MAX_REGIONS, MAX_TRACKS_PER_LAYER
from threat_music.util.state_log import log_event


@dataclass
class HeadlessContext:
    store: ProjectStore
    base_dir: Path | None = None
    exports: list[str] = field(default_factory=list)


class HeadlessRunner:
    """Drive the editor from a line-oriented script.

    Regions are addressed by their current display index; the runner resolves
    the index to the region id before every edit.
    """

    def __init__(
        self,
        *,
        strict: bool = False,
        dry_run: bool = False,
        log_events: bool = False,
        ids: IdGenerator | None = None,
        out_dir: str | Path = "out",
        archive_name: str = DEFAULT_ARCHIVE_NAME,
    ) -> None:
        self.ids = ids
        self.ctx = HeadlessContext(store=ProjectStore(ids=ids))
        self.strict = strict
        self.dry_run = dry_run
        self.log_events = log_events
        self.out_dir = Path(out_dir)
        self.archive_name = archive_name
        self.commands_executed = 0
        self.warnings: list[str] = []

    @property
    def store(self) -> ProjectStore:
        return self.ctx.store

    def run_lines(self, lines: list[str], *, base_dir: Path | None = None) -> None:
        prev_base = self.ctx.base_dir
        self.ctx.base_dir = base_dir
        try:
            self._run_lines(lines, base_dir)
        finally:
            self.ctx.base_dir = prev_base

    def _run_lines(self, lines: list[str], base: Path | None) -> None:
        for lineno, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            # include other scripts
            if line.startswith("include "):
                inc = line.split(" ", 1)[1].strip().strip('"')
                inc_path = Path(inc)
                if base is not None and not inc_path.is_absolute():
                    inc_path = base / inc_path
                if not inc_path.exists():
                    msg = f"include not found: {inc_path}"
                    if self.strict:
                        raise FileNotFoundError(msg)
                    self.warnings.append(msg)
                    continue
                inc_lines = inc_path.read_text(encoding="utf-8").splitlines()
                self.run_lines(inc_lines, base_dir=inc_path.parent)
                continue

            try:
                self.run_command(line)
                self.commands_executed += 1
            except Exception as e:
                msg = f"Headless error line {lineno}: {line} ({e})"
                if self.strict:
                    raise RuntimeError(msg) from e
                self.warnings.append(msg)
                continue

    def _resolve(self, p: str) -> Path:
        path = Path(p).expanduser()
        if not path.is_absolute() and self.ctx.base_dir is not None:
            path = self.ctx.base_dir / path
        return path

    def _sources(self, paths: list[str]) -> list[AudioSource]:
        # non-.ogg names are dropped like an editor drop would drop them
        sources = filter_ogg(source_from_path(self._resolve(p)) for p in paths)
        for s in sources:
            if not Path(str(s.payload)).is_file():
                raise FileNotFoundError(f"audio file not found: {s.payload}")
        return sources

    def _region(self, ref: str) -> Region:
        idx = int(ref)
        region = self.store.region_at(idx)
        if region is None:
            raise IndexError(f"region index out of range: {idx}")
        return region

    def _check_room(self, region: Region, side: Side, target: int, from_layer: int) -> None:
        layers = region.layers(side)
        if target != from_layer and 0 <= target < len(layers) and len(layers[target]) >= MAX_TRACKS_PER_LAYER:
            raise RuntimeError(f"max tracks per layer reached ({MAX_TRACKS_PER_LAYER})")

    def _log(self, event: dict[str, Any]) -> None:
        if not self.log_events:
            return
        try:
            log_event(event)
        except OSError as e:
            self.warnings.append(f"event log unavailable ({e})")

    def run_command(self, line: str) -> None:
        parts = shlex.split(line)
        cmd, *args = parts
        store = self.store

        if cmd == "new_region":
            # new_region [name...]
            if len(store) >= MAX_REGIONS:
                raise RuntimeError(f"max regions reached ({MAX_REGIONS})")
            region = store.create_region()
            if args:
                store.rename_region(region.id, " ".join(args))
            return

        if cmd == "load_recipe":
            project = load_recipe(self._resolve(args[0]), ids=self.ids)
            for r in project.regions:
                store.add_region(r)
            return

        if cmd == "import_pack":
            project = import_pack(self._resolve(args[0]), ids=self.ids)
            for r in project.regions:
                store.add_region(r)
            return

        if cmd == "rename_region":
            # rename_region <r> <name...>
            region = self._region(args[0])
            store.rename_region(region.id, " ".join(args[1:]))
            return

        if cmd == "delete_region":
            store.delete_region(self._region(args[0]).id)
            return

        if cmd == "add_layer":
            # add_layer <r> <day|night>
            region = self._region(args[0])
            side = parse_side(args[1])
            if len(region.layers(side)) >= MAX_LAYERS_PER_SIDE:
                raise RuntimeError(f"max layers reached ({MAX_LAYERS_PER_SIDE})")
            store.update_region(region.id, lambda r: layer_ops.add_layer(r, side))
            return

        if cmd == "delete_layer":
            # delete_layer <r> <side> <layer>
            region = self._region(args[0])
            side = parse_side(args[1])
            li = int(args[2])
            store.update_region(region.id, lambda r: layer_ops.delete_layer(r, side, li))
            return

        if cmd == "add_tracks":
            # add_tracks <r> <side> <layer> <file.ogg...>
            region = self._region(args[0])
            side = parse_side(args[1])
            li = int(args[2])
            sources = self._sources(args[3:])
            layers = region.layers(side)
            if 0 <= li < len(layers) and len(layers[li]) + len(sources) > MAX_TRACKS_PER_LAYER:
                raise RuntimeError(f"max tracks per layer reached ({MAX_TRACKS_PER_LAYER})")
            store.update_region(region.id, lambda r: layer_ops.add_tracks(r, side, li, sources))
            return

        if cmd == "remove_track":
            # remove_track <r> <side> <layer> <track>
            region = self._region(args[0])
            side = parse_side(args[1])
            li, ti = int(args[2]), int(args[3])
            store.update_region(region.id, lambda r: layer_ops.remove_track(r, side, li, ti))
            return

        if cmd == "move_track":
            # move_track <r> <side> <target_layer> <from_layer> <from_track>
            region = self._region(args[0])
            side = parse_side(args[1])
            target, from_layer, from_track = int(args[2]), int(args[3]), int(args[4])
            self._check_room(region, side, target, from_layer)
            store.update_region(region.id, lambda r: layer_ops.move_track(r, side, target, from_layer, from_track))
            return

        if cmd == "move_layer":
            # move_layer <r> <side> <target> <from>
            region = self._region(args[0])
            side = parse_side(args[1])
            target, src = int(args[2]), int(args[3])
            store.update_region(region.id, lambda r: layer_ops.move_layer(r, side, target, src))
            return

        if cmd == "drop":
            # drop <r> <side> <layer> <kind> '<json payload>'
            region = self._region(args[0])
            target = DropTarget(side=parse_side(args[1]), layer_index=int(args[2]))
            kind = args[3]
            command = parse_drag(kind, args[4] if len(args) > 4 else None)
            if command is not None and command.kind == DRAG_TRACK and command.side in (None, target.side):
                self._check_room(region, target.side, target.layer_index, command.layer_index)
            store.update_region(region.id, lambda r: apply_drop(r, target, command))
            return

        if cmd == "add_music":
            # add_music <r> <file.ogg...>
            region = self._region(args[0])
            sources = self._sources(args[1:])
            if len(region.ambient_tracks) + len(sources) > MAX_MUSIC_TRACKS:
                raise RuntimeError(f"max music tracks reached ({MAX_MUSIC_TRACKS})")
            store.update_region(region.id, lambda r: add_music(r, sources))
            return

        if cmd == "remove_music":
            region = self._region(args[0])
            i = int(args[1])
            store.update_region(region.id, lambda r: remove_music(r, i))
            return

        if cmd in {"export_zip", "export_dir"}:
            # export_zip [out.zip] | export_dir <dir>
            snapshot = store.snapshot()
            plan = plan_export(snapshot)
            if cmd == "export_zip":
                out = self._resolve(args[0]) if args else self.out_dir / self.archive_name
            else:
                out = self._resolve(args[0])
            if not self.dry_run:
                if cmd == "export_zip":
                    save_zip(snapshot, out)
                else:
                    export_pack(snapshot, DirectoryArchiveWriter(out))
            self.ctx.exports.append(str(out))
            self._log(
                {
                    "event": cmd,
                    "out": str(out),
                    "regions": len(snapshot.regions),
                    "entries": len(plan.entries),
                    "dry_run": self.dry_run,
                    **plan.report.to_dict(),
                }
            )
            return

        if cmd == "dump_state":
            out = self._resolve(args[0])
            payload = store.snapshot().to_dict()
            payload["export"] = plan_export(store.snapshot()).report.to_dict()
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
            return

        raise ValueError(f"Unknown command: {cmd}")


def read_lines_from_path_or_stdin(path: str | None) -> list[str]:
    if path and path != "-":
        return Path(path).read_text(encoding="utf-8").splitlines()
    return sys.stdin.read().splitlines()


def script_base_dir(path: str | None) -> Path | None:
    if path and path != "-":
        return Path(path).expanduser().resolve().parent
    return None
