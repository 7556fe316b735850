from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any


def default_config_dir() -> Path:
    return Path.home() / ".config" / "threat-music"


def default_config_path() -> Path:
    return default_config_dir() / "config.json"


@dataclass
class AppConfig:
    out_dir: str = "out"
    archive_name: str = "customMusic.zip"
    log_events: bool = False  # append export/run events to events.jsonl

    def to_dict(self) -> dict[str, Any]:
        return {
            "out_dir": self.out_dir,
            "archive_name": self.archive_name,
            "log_events": self.log_events,
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "AppConfig":
        return AppConfig(
            out_dir=str(d.get("out_dir") or "out"),
            archive_name=str(d.get("archive_name") or "customMusic.zip"),
            log_events=bool(d.get("log_events", False)),
        )

    def archive_path(self) -> Path:
        return Path(self.out_dir).expanduser() / self.archive_name


def load_config(path: Path | None = None) -> AppConfig:
    p = path or default_config_path()
    if not p.exists():
        return AppConfig()
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"config must be a JSON object: {p}")
    return AppConfig.from_dict(data)


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    p = path or default_config_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(cfg.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return p
