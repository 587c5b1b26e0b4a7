"""
Token export helpers.

Folder and filename validation, content equivalence, export file matching
and the export pipeline interfaces used by the commit orchestrator.
"""

from .equivalence import (
    TYPOGRAPHY_MARKER,
    canonical_dumps,
    canonicalize,
    contains_semantic_marker,
    contains_typography_tokens,
    contents_match,
    normalize_for_compare,
)
from .filenames import DEFAULT_FILENAME, FilenameValidation, validate_filename
from .folders import (
    CommitPath,
    FolderNormalization,
    ResolvedFolder,
    folder_to_commit_path,
    normalize_folder,
    resolve_folder,
)
from .matching import (
    parse_collection_and_mode,
    pick_export_file,
    pretty_export_name,
    safe_key_from_collection_and_mode,
)
from .models import ExportBundle, ExportFile, ExportFormat, Scope, SelectionDiagnostics
from .source import DirectoryExportSource, ExportPipeline, SelectionAnalyzer

__all__ = [
    # Models
    "ExportBundle",
    "ExportFile",
    "ExportFormat",
    "Scope",
    "SelectionDiagnostics",
    # Folders and filenames
    "CommitPath",
    "DEFAULT_FILENAME",
    "FilenameValidation",
    "FolderNormalization",
    "ResolvedFolder",
    "folder_to_commit_path",
    "normalize_folder",
    "resolve_folder",
    "validate_filename",
    # Equivalence
    "TYPOGRAPHY_MARKER",
    "canonical_dumps",
    "canonicalize",
    "contains_semantic_marker",
    "contains_typography_tokens",
    "contents_match",
    "normalize_for_compare",
    # Matching
    "parse_collection_and_mode",
    "pick_export_file",
    "pretty_export_name",
    "safe_key_from_collection_and_mode",
    # Pipeline
    "DirectoryExportSource",
    "ExportPipeline",
    "SelectionAnalyzer",
]
