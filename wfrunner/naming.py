"""Container naming and small mapping helpers."""

from __future__ import annotations

import re
from typing import Any, Mapping

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_MATRIX_SUFFIX = re.compile(r"-[0-9]+$")
_MAX_NAME_LEN = 30


def trim_to_len(text: str, length: int) -> str:
    """Return ``text`` cut to at most ``length`` characters (negative means 0)."""
    return text[: max(length, 0)]


def create_container_name(*args: str) -> str:
    """Build a container-safe name from the given parts.

    Every part except the last is shortened so that the parts share about
    thirty characters. A trailing ``-<number>`` on a part (as matrix jobs
    carry) is kept so that names do not clash.
    """
    if not args:
        return ""
    part_len = _MAX_NAME_LEN // len(args) - 1
    *leading, last = args
    pieces: list[str] = []
    for part in leading:
        cleaned = _NON_ALNUM.sub("-", part)
        suffix = _MATRIX_SUFFIX.search(part)
        if suffix:
            number = suffix.group(0)
            pieces.append(trim_to_len(cleaned, part_len - len(number)))
            pieces.append(number)
        else:
            pieces.append(trim_to_len(cleaned, part_len))
    pieces.append(_NON_ALNUM.sub("-", last))
    return "-".join(pieces).strip("-").replace("--", "-")


def merge_maps(*args: Mapping[str, str] | None) -> dict[str, str]:
    """Return a new dict holding every mapping in turn; later ones win."""
    merged: dict[str, str] = {}
    for mapping in args:
        if mapping:
            merged.update(mapping)
    return merged


def nested_map_lookup(mapping: Mapping[str, Any], *args: str) -> Any:
    """Follow the keys through nested mappings; None if any step is missing."""
    if not args:
        return None
    current: Any = mapping
    for key in args:
        if not isinstance(current, Mapping) or key not in current:
            return None
        current = current[key]
    return current


def as_string(value: Any) -> str:
    """Return ``value`` if it is a string, otherwise an empty string."""
    return value if isinstance(value, str) else ""