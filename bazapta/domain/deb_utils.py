from urllib.parse import quote, unquote
from typing import Optional

# Characters Debian versions use that are safe to keep literal in a path segment.
_SEGMENT_SAFE = ":+~"


def strip_epoch(version: str) -> str:
    """
    Remove a Debian epoch ("1:2.0-1" -> "2.0-1").

    Pool file names never carry the epoch.
    """
    _, sep, rest = version.partition(":")
    return rest if sep else version


def deb_filename(name: str, version: str, architecture: str) -> str:
    return f"{name}_{strip_epoch(version)}_{architecture}.deb"


def quote_segment(value: str) -> str:
    return quote(value, safe=_SEGMENT_SAFE)


def unquote_path(path: Optional[str]) -> str:
    return unquote(path or "")


def quote_component(value: str) -> str:
    """Like quote_segment, but a component's "/" separators stay literal."""
    return quote(value, safe="/" + _SEGMENT_SAFE)
