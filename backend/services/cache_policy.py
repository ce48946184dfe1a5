"""Cache lifetimes for proxied Plex paths."""

import re

DEFAULT_CACHE_SECONDS = 60 * 60
IMAGE_CACHE_SECONDS = 60 * 60 * 24

# Checked in order, first prefix wins
_PREFIX_DURATIONS: list[tuple[str, int]] = [
    ("/library/sections", 60 * 10),
    ("/library/metadata/", 60 * 60 * 2),
]

_PATTERN_DURATIONS: list[tuple[re.Pattern, int]] = [
    (re.compile(r"^/library/sections/\d+/all"), 60 * 30),
    (re.compile(r"^/library/metadata/\d+/allLeaves"), 60 * 30),
]

# Live state, never cached
_NO_CACHE_PATHS = {"/status/sessions"}


def classify(path: str) -> int:
    """Return the cache lifetime in seconds for an API path (0 = don't cache)."""
    # Section contents are matched before the shorter /library/sections prefix
    for pattern, seconds in _PATTERN_DURATIONS:
        if pattern.match(path):
            return seconds
    for prefix, seconds in _PREFIX_DURATIONS:
        if path.startswith(prefix):
            return seconds
    if path in _NO_CACHE_PATHS:
        return 0
    return DEFAULT_CACHE_SECONDS


def classify_image(path: str) -> int:
    """Artwork is immutable per URL (Plex bakes a timestamp into it)."""
    return IMAGE_CACHE_SECONDS
