"""Position-aware walk over JSON object members.

``json.loads`` drops offsets, so the parsers use this to find where each
string value starts in the source text.
"""

from __future__ import annotations

from collections.abc import Iterator
from json.decoder import scanstring

_WS = " \t\r\n"


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in _WS:
        pos += 1
    return pos


def _skip_value(text: str, pos: int) -> int:
    """Return the index just past the JSON value starting at *pos*."""
    if text[pos] == '"':
        _, end = scanstring(text, pos + 1)
        return end
    if text[pos] in "{[":
        depth = 0
        while pos < len(text):
            ch = text[pos]
            if ch == '"':
                _, pos = scanstring(text, pos + 1)
                continue
            if ch in "{[":
                depth += 1
            elif ch in "}]":
                depth -= 1
                if depth == 0:
                    return pos + 1
            pos += 1
        raise ValueError("unterminated JSON container")
    while pos < len(text) and text[pos] not in ",}]" + _WS:
        pos += 1
    return pos


def iter_members(text: str, start: int) -> Iterator[tuple[str, int]]:
    """Yield ``(key, value_offset)`` for each member of the object at *start*.

    *start* must point at the opening ``{``. Raises ``ValueError`` on
    malformed input.
    """
    if text[start] != "{":
        raise ValueError(f"expected '{{' at offset {start}")
    pos = _skip_ws(text, start + 1)
    if pos < len(text) and text[pos] == "}":
        return
    while pos < len(text):
        if text[pos] != '"':
            raise ValueError(f"expected member name at offset {pos}")
        key, pos = scanstring(text, pos + 1)
        pos = _skip_ws(text, pos)
        if text[pos] != ":":
            raise ValueError(f"expected ':' at offset {pos}")
        value_at = _skip_ws(text, pos + 1)
        yield key, value_at
        pos = _skip_ws(text, _skip_value(text, value_at))
        if pos < len(text) and text[pos] == ",":
            pos = _skip_ws(text, pos + 1)
            continue
        if pos < len(text) and text[pos] == "}":
            return
        raise ValueError(f"expected ',' or '}}' at offset {pos}")
    raise ValueError("unterminated JSON object")


def root_object(text: str) -> int:
    """Offset of the top-level ``{``."""
    pos = _skip_ws(text, 0)
    if pos >= len(text) or text[pos] != "{":
        raise ValueError("document is not a JSON object")
    return pos


def string_at(text: str, offset: int) -> str | None:
    """Decode the JSON string starting at *offset*, or None if it is not one."""
    if offset >= len(text) or text[offset] != '"':
        return None
    value, _ = scanstring(text, offset + 1)
    return value


def line_column(text: str, offset: int) -> tuple[int, int]:
    """1-based (line, column) of *offset*."""
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column
