"""
Content equivalence for token documents.

The remote copy of a token file may have been reformatted by hand or by
another tool, so "unchanged" is decided in three tiers, cheapest first:

1. byte-identical text;
2. identical after CRLF -> LF and trailing-whitespace trimming;
3. both sides parse as JSON and their canonical forms are equal.

Canonical form sorts mapping keys recursively and keeps list order.
"""

from __future__ import annotations

import json
import re
from typing import Any

TYPOGRAPHY_MARKER = "typography"

_UNPARSED = object()


def normalize_for_compare(text: str) -> str:
    """Normalize line endings and drop trailing whitespace."""
    return text.replace("\r\n", "\n").rstrip()


def try_parse_json(text: str) -> Any:
    """Parse ``text`` as JSON, returning a sentinel object on failure."""
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return _UNPARSED


def canonicalize(value: Any) -> Any:
    """
    Return ``value`` with every mapping's keys sorted, recursively.

    Lists keep their order (their items are canonicalized). Integral floats
    become ints so `1.0` and `1` compare equal. Every other value is
    returned unchanged.
    """
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, list):
        return [canonicalize(item) for item in value]
    if isinstance(value, dict):
        return {key: canonicalize(value[key]) for key in sorted(value)}
    return value


def canonical_dumps(value: Any) -> str:
    """Stringify the canonical form of ``value``."""
    return json.dumps(canonicalize(value), ensure_ascii=False, separators=(",", ":"))


def contents_match(existing: str, next_content: str) -> bool:
    """True when two JSON texts carry the same document."""
    if existing == next_content:
        return True
    if normalize_for_compare(existing) == normalize_for_compare(next_content):
        return True

    existing_json = try_parse_json(existing)
    next_json = try_parse_json(next_content)
    if existing_json is _UNPARSED or next_json is _UNPARSED:
        return False
    return canonical_dumps(existing_json) == canonical_dumps(next_json)


def _tree_has_marker(value: Any, marker: str) -> bool:
    if not value:
        return False
    if isinstance(value, str):
        return value.lower() == marker
    if isinstance(value, dict):
        declared = value.get("$type")
        if isinstance(declared, str) and declared.lower() == marker:
            return True
        return any(_tree_has_marker(child, marker) for child in value.values())
    if isinstance(value, list):
        return any(_tree_has_marker(child, marker) for child in value)
    return False


def contains_semantic_marker(text: str, marker: str) -> bool:
    """
    Detect whether a document contains a token of kind ``marker``.

    Walks the parsed JSON for a ``$type`` equal to ``marker`` (case-insensitive);
    when the text does not parse, falls back to a regex scan.
    """
    needle = marker.lower()
    parsed = try_parse_json(text)
    if parsed is not _UNPARSED:
        return _tree_has_marker(parsed, needle)
    pattern = re.compile(r'"\$type"\s*:\s*"' + re.escape(needle) + '"', re.IGNORECASE)
    return bool(pattern.search(text))


def contains_typography_tokens(text: str) -> bool:
    return contains_semantic_marker(text, TYPOGRAPHY_MARKER)
