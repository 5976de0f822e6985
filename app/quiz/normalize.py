from __future__ import annotations

import re

_FENCE_RE = re.compile(r"```(?:json)?\n?", re.IGNORECASE)


def _first_index(text: str, chars: str) -> int:
    hits = [idx for idx in (text.find(ch) for ch in chars) if idx != -1]
    return min(hits) if hits else -1


def normalize_response(text: str) -> str:
    """Narrow a raw model reply down to the span that should hold one JSON value.

    Fence markers are dropped, then everything before the first ``{``/``[`` and
    after the last ``}``/``]`` is cut. Nothing is validated here.
    """
    cleaned = _FENCE_RE.sub("", text or "").strip()

    start = _first_index(cleaned, "{[")
    if start != -1:
        cleaned = cleaned[start:]

    end = max(cleaned.rfind("}"), cleaned.rfind("]"))
    if end != -1:
        cleaned = cleaned[: end + 1]

    return cleaned
