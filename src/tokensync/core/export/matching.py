"""
Locating the export file for one collection/mode pair.

Per-mode exports have been named several ways over time. The rules below
are tried strictly in order and the first file hit by the earliest rule
wins:

1. exact pretty name          ``"<collection> - <mode>.json"``
2. exact pretty name, no ext  ``"<collection> - <mode>"``
3. contains pretty name       ``"... <collection> - <mode> ..."``
4. contains legacy key        ``"<collection>_mode=<mode>"``
5. contains legacy path       ``"<collection>/mode=<mode>"``
6. contains safe key          ``safe_key_from_collection_and_mode(...)``
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from tokensync.core.export.models import ExportFile

_LEGACY_EXPORT_NAME = re.compile(r"^(.*)_mode=(.*)\.tokens\.json$")


def safe_key_from_collection_and_mode(collection: str, mode: str) -> str:
    """Build the filesystem-safe ``<collection>_mode=<mode>`` key."""
    base = f"{collection}/mode={mode}"
    return "".join("_" if ch in "/\\:" else ch for ch in base)


def match_rules(collection: str, mode: str) -> list[Callable[[str], bool]]:
    """Return the ordered name predicates for ``collection``/``mode``."""
    pretty = f"{collection} - {mode}"
    legacy_key = f"{collection}_mode={mode}"
    legacy_path = f"{collection}/mode={mode}"
    safe_key = safe_key_from_collection_and_mode(collection, mode)
    return [
        lambda name: name == f"{pretty}.json",
        lambda name: name == pretty,
        lambda name: pretty in name,
        lambda name: legacy_key in name,
        lambda name: legacy_path in name,
        lambda name: safe_key in name,
    ]


def pick_export_file(
    files: Sequence[ExportFile], collection: str, mode: str
) -> ExportFile | None:
    """Return the export file for ``collection``/``mode``, or None."""
    for rule in match_rules(collection, mode):
        for export_file in files:
            if rule(export_file.name or ""):
                return export_file
    return None


def pretty_export_name(original: str | None) -> str:
    """
    Turn a pipeline file name into the name written to the repository.

    Example:
        >>> pretty_export_name("Colors_mode=Dark.tokens.json")
        'Colors - Dark.json'
    """
    name = original if isinstance(original, str) and original else "tokens.json"
    match = _LEGACY_EXPORT_NAME.match(name)
    if match:
        return f"{match.group(1).strip()} - {match.group(2).strip()}.json"
    return name if name.endswith(".json") else f"{name}.json"


def parse_collection_and_mode(name: str) -> tuple[str, str] | None:
    """
    Recover ``(collection, mode)`` from a per-mode file name.

    Understands both ``"<c> - <m>.json"`` and ``"<c>_mode=<m>.tokens.json"``.
    """
    pretty = pretty_export_name(name)
    stem = pretty[: -len(".json")]
    collection, sep, mode = stem.partition(" - ")
    if not sep or not collection.strip() or not mode.strip():
        return None
    return collection.strip(), mode.strip()
