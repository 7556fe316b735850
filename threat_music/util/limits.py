"""Hard caps for scripted edits.

Enforced by the headless runner and the recipe loader; the pure mutators
themselves stay total and never raise. The per-layer cap also applies to
tracks moved into a layer, not only to added ones.
"""

from __future__ import annotations

MAX_REGIONS = 256
MAX_LAYERS_PER_SIDE = 64
MAX_TRACKS_PER_LAYER = 512
MAX_MUSIC_TRACKS = 1024
