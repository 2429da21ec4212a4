"""Channel name normalisation."""

from __future__ import annotations

import re

MAX_CHANNEL_LENGTH = 30

# Whitespace plus the punctuation that never survives in a channel name
_STRIP_RE = re.compile(r"[\s,.?!<>()\[\]\"#]")


def normalize_channel(name: object) -> str | None:
    """Fold a channel name to its canonical form.

    Args:
        name: Raw channel name, with or without a leading ``#``

    Returns:
        Lowercased name without whitespace or punctuation, truncated to
        30 characters, or None if nothing is left
    """
    if not isinstance(name, str):
        return None
    folded = _STRIP_RE.sub("", name.lower())[:MAX_CHANNEL_LENGTH]
    return folded or None
