from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
# "." plus the ideographic / fullwidth / halfwidth full stops
_DOTS = re.compile("[.\\u3002\\uff0e\\uff61]+")
_DISALLOWED = re.compile(r"[^a-z0-9_-]")
_UNDERSCORES = re.compile(r"_+")

_OGG_SUFFIX = re.compile(r"\.ogg\Z", re.IGNORECASE)

REGION_FALLBACK = "region"


def sanitize_name(raw: str | None) -> str:
    """Canonicalize a display name into an archive-safe identifier.

    Order matters: whitespace becomes "_", dots are removed (not replaced),
    anything else outside [a-z0-9_-] becomes "_", then underscore runs are
    collapsed and trimmed. The result may be empty.
    """

    s = str(raw if raw is not None else "").lower()
    s = _WHITESPACE.sub("_", s)
    s = _DOTS.sub("", s)
    s = _DISALLOWED.sub("_", s)
    s = _UNDERSCORES.sub("_", s)
    return s.strip("_")


def strip_ogg_suffix(name: str) -> str:
    return _OGG_SUFFIX.sub("", name)


def is_ogg_name(name: str) -> bool:
    return str(name).lower().endswith(".ogg")


def region_file_base(name: str) -> str:
    return sanitize_name(name) or REGION_FALLBACK
