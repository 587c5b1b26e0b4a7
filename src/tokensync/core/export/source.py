"""
Export pipeline interfaces and a directory-backed implementation.

The commit engine never builds token documents itself; it asks an
``ExportPipeline`` for them. ``DirectoryExportSource`` serves documents
that were already exported to a local directory, e.g. by the design tool's
own "export DTCG" action:

    exports/
        Colors - Light.json
        Colors - Dark.json
        Spacing_mode=Default.tokens.json
        typography.json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from tokensync.core.export.matching import parse_collection_and_mode, pick_export_file
from tokensync.core.export.models import (
    ExportBundle,
    ExportFile,
    ExportFormat,
    SelectionDiagnostics,
)

logger = logging.getLogger(__name__)

TYPOGRAPHY_FILENAME = "typography.json"
SINGLE_FILENAME = "tokens.json"

_STYLE_DICTIONARY_KEYS = {"$value": "value", "$type": "type", "$description": "description"}


class ExportPipeline(Protocol):
    """Produces token documents for a requested export format."""

    def export(
        self,
        format: ExportFormat,
        *,
        style_dictionary: bool = False,
        flat_tokens: bool = False,
    ) -> ExportBundle:
        """Return the exported files for ``format``."""
        ...


class SelectionAnalyzer(Protocol):
    """Explains what a collection/mode pair contains."""

    def analyze_selection_state(self, collection: str, mode: str) -> SelectionDiagnostics:
        ...


def is_token(node: Any) -> bool:
    """A DTCG token is a mapping carrying a ``$value`` key."""
    return isinstance(node, dict) and "$value" in node


def iter_tokens(document: Any) -> list[dict[str, Any]]:
    """Return every token node in ``document``, depth first."""
    found: list[dict[str, Any]] = []
    if is_token(document):
        found.append(document)
    elif isinstance(document, dict):
        for key, child in document.items():
            if key.startswith("$"):
                continue
            found.extend(iter_tokens(child))
    return found


def flatten_tokens(document: Any, prefix: str = "") -> dict[str, Any]:
    """Flatten nested token groups into dot-joined token paths."""
    flat: dict[str, Any] = {}
    if not isinstance(document, dict):
        return flat
    for key, child in document.items():
        if key.startswith("$"):
            if not prefix:
                flat[key] = child
            continue
        path = f"{prefix}.{key}" if prefix else key
        if is_token(child):
            flat[path] = child
        elif isinstance(child, dict):
            flat.update(flatten_tokens(child, path))
    return flat


def to_style_dictionary(document: Any) -> Any:
    """Rename DTCG ``$``-prefixed token keys to Style Dictionary keys."""
    if isinstance(document, list):
        return [to_style_dictionary(item) for item in document]
    if isinstance(document, dict):
        return {
            _STYLE_DICTIONARY_KEYS.get(key, key): to_style_dictionary(value)
            for key, value in document.items()
        }
    return document


class DirectoryExportSource:
    """
    Serve exports from a directory of DTCG JSON files.

    Implements both ExportPipeline and SelectionAnalyzer.

    Example:
        >>> source = DirectoryExportSource(Path("exports"))
        >>> bundle = source.export(ExportFormat.PER_MODE)
        >>> [f.name for f in bundle.files]
        ['Colors - Dark.json', 'Colors - Light.json']
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def _read(self, path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    def _per_mode_paths(self) -> list[Path]:
        if not self.root.is_dir():
            raise FileNotFoundError(f"Export directory not found: {self.root}")
        return sorted(
            p
            for p in self.root.iterdir()
            if p.is_file()
            and p.suffix.lower() == ".json"
            and p.name != TYPOGRAPHY_FILENAME
            and p.name != SINGLE_FILENAME
        )

    def _per_mode_files(self) -> list[ExportFile]:
        return [ExportFile(name=p.name, json=self._read(p)) for p in self._per_mode_paths()]

    def export(
        self,
        format: ExportFormat,
        *,
        style_dictionary: bool = False,
        flat_tokens: bool = False,
    ) -> ExportBundle:
        if format == ExportFormat.TYPOGRAPHY:
            path = self.root / TYPOGRAPHY_FILENAME
            document = self._read(path) if path.is_file() else {}
            return ExportBundle(files=[ExportFile(name=TYPOGRAPHY_FILENAME, json=document)])

        per_mode = self._per_mode_files()
        if format == ExportFormat.SINGLE:
            combined: dict[str, Any] = {}
            for export_file in per_mode:
                parsed = parse_collection_and_mode(export_file.name)
                if parsed is None:
                    combined[Path(export_file.name).stem] = export_file.json_data
                    continue
                collection, mode = parsed
                combined.setdefault(collection, {})[mode] = export_file.json_data
            files = [ExportFile(name=SINGLE_FILENAME, json=combined)]
        else:
            files = per_mode

        logger.debug("Exported %d file(s) from %s as %s", len(files), self.root, format.value)
        return ExportBundle(
            files=[
                ExportFile(
                    name=f.name,
                    json=self._transform(
                        f.json_data,
                        style_dictionary=style_dictionary,
                        flat_tokens=flat_tokens,
                        nested=format == ExportFormat.SINGLE,
                    ),
                )
                for f in files
            ]
        )

    def _transform(
        self, document: Any, *, style_dictionary: bool, flat_tokens: bool, nested: bool
    ) -> Any:
        if flat_tokens:
            if nested and isinstance(document, dict):
                # Flatten each collection/mode document, keep the outer layout
                document = {
                    collection: (
                        {mode: flatten_tokens(doc) for mode, doc in modes.items()}
                        if isinstance(modes, dict)
                        else modes
                    )
                    for collection, modes in document.items()
                }
            else:
                document = flatten_tokens(document)
        if style_dictionary:
            document = to_style_dictionary(document)
        return document

    def analyze_selection_state(self, collection: str, mode: str) -> SelectionDiagnostics:
        try:
            per_mode = self._per_mode_files()
        except (OSError, ValueError) as e:
            return SelectionDiagnostics(ok=False, message=str(e) or "Analysis failed")

        known = [parse_collection_and_mode(f.name) for f in per_mode]
        if not any(parsed and parsed[0] == collection for parsed in known):
            return SelectionDiagnostics(
                ok=False, message=f'Collection "{collection}" not found in this file.'
            )

        picked = pick_export_file(per_mode, collection, mode)
        if picked is None:
            return SelectionDiagnostics(
                ok=False,
                message=f'Mode "{mode}" not found in collection "{collection}".',
            )

        tokens = iter_tokens(picked.json_data)
        with_values = [t for t in tokens if t.get("$value") not in (None, "")]
        return SelectionDiagnostics(
            ok=True,
            variable_count=len(tokens),
            variables_with_values=len(with_values),
        )
