"""Editing operations.

Everything below ProjectStore is a pure function over immutable values:
- layers: per-side layer CRUD, move_track / move_layer
- music: ambient list add/remove
- drag: drag payload wire format -> MoveCommand -> apply_drop
"""

from .store import ProjectStore
from .tracks import AudioSource, filter_ogg, source_from_path, track_from_source

__all__ = [
    "AudioSource",
    "ProjectStore",
    "filter_ogg",
    "source_from_path",
    "track_from_source",
]
