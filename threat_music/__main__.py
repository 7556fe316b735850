from __future__ import annotations

import argparse
import sys
from pathlib import Path

from threat_music.util.config import default_config_path, load_config
from threat_music.util.naming import sanitize_name
from threat_music.util.state_log import events_log_path


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="threat-music",
        add_help=True,
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            "threat-music: build region configs + .ogg bundles into a customMusic/ pack\n\n"
            "Export layout:\n"
            "  customMusic/regions/<region>.json\n"
            "  customMusic/sounds/songs/<id>.ogg\n"
            "  customMusic/sounds/threatMusic/<id>.ogg\n"
        ),
    )

    p.add_argument("--version", action="store_true", help="Print version and exit.")
    p.add_argument(
        "--headless",
        action="store_true",
        help="Run a headless script (new_region/add_tracks/move_track/... + export_zip).",
    )
    p.add_argument("--script", default=None, help="Path to headless script (.txt), or - for stdin")
    p.add_argument("--config", default=None, help="Path to config JSON (default: ~/.config/threat-music/config.json)")

    sub = p.add_subparsers(dest="cmd")

    build = sub.add_parser("build", help="Build a pack zip from a YAML/JSON recipe.")
    build.add_argument("recipe", help="Path to recipe (.yaml/.yml/.json)")
    build.add_argument("--out", default=None, help="Output zip (default: <out_dir>/customMusic.zip)")
    build.add_argument("--dir", action="store_true", help="Write an unpacked customMusic/ tree instead of a zip.")

    san = sub.add_parser("sanitize", help="Print the sanitized form of one or more names.")
    san.add_argument("names", nargs="+")

    sub.add_parser("paths", help="Print config and event log paths.")

    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)

    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "version", False):
        try:
            from importlib.metadata import version

            v = version("threat-music")
        except Exception:
            v = "0.0.0"
        print(f"threat-music {v}")
        return

    try:
        cfg = load_config(Path(args.config).expanduser() if args.config else None)
    except ValueError as e:
        raise SystemExit(f"ERROR: {e}")

    if args.headless:
        if not args.script:
            raise SystemExit("ERROR: --headless requires --script <path>")

        from threat_music.cli.headless import HeadlessRunner, read_lines_from_path_or_stdin, script_base_dir

        lines = read_lines_from_path_or_stdin(args.script)
        r = HeadlessRunner(
            strict=True, log_events=cfg.log_events, out_dir=cfg.out_dir, archive_name=cfg.archive_name
        )
        r.run_lines(lines, base_dir=script_base_dir(args.script))
        for out in r.ctx.exports:
            print(f"exported: {out}")
        return

    if args.cmd == "build":
        from threat_music.export.serializer import plan_export
        from threat_music.export.writers import DirectoryArchiveWriter, export_pack, save_zip
        from threat_music.io.recipe import load_recipe

        try:
            project = load_recipe(args.recipe)
        except (OSError, ValueError) as e:
            raise SystemExit(f"ERROR: could not load recipe ({e})")

        report = plan_export(project).report
        if args.dir:
            out = export_pack(project, DirectoryArchiveWriter(args.out or cfg.out_dir))
        else:
            out = save_zip(project, args.out or cfg.archive_path())
        print(f"exported: {out} ({len(project.regions)} regions)")
        for folder, tid in report.missing_audio:
            print(f"- no audio for: {folder}/{tid}.ogg")
        for folder, tid in report.duplicate_ids:
            print(f"- duplicate id skipped: {folder}/{tid}.ogg")
        for path in report.region_collisions:
            print(f"- region file overwritten: {path}")
        return

    if args.cmd == "sanitize":
        for n in args.names:
            print(sanitize_name(n))
        return

    if args.cmd == "paths":
        print(f"config: {default_config_path()}")
        print(f"events: {events_log_path()}")
        print(f"out: {cfg.archive_path()}")
        return

    parser.print_help()


if __name__ == "__main__":
    main()
