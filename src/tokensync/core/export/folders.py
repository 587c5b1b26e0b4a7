"""
Folder path normalization for repository export targets.

A folder typed by the user is turned into two canonical forms:

- the *storage* form kept in the selection store: slash-joined, no leading
  or trailing slash, ``""`` when unset and ``"/"`` for the repository root;
- the *commit* path used against the remote tree: ``""`` for the root.

Unsafe segments are rejected with a message, never silently repaired.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

INVALID_FOLDER_SEGMENT = re.compile(r'[<>:"\\|?*\x00-\x1f]')
ROOT_SENTINEL = "/"
_ROOT_ALIASES = ("/", "./", ".")


@dataclass(frozen=True)
class FolderNormalization:
    """Outcome of normalizing a raw folder string."""

    ok: bool
    storage: str = ""
    message: str = ""

    @property
    def is_root(self) -> bool:
        return self.ok and self.storage in ("", ROOT_SENTINEL)

    @property
    def display(self) -> str:
        """Human-readable folder name for messages."""
        return "repo root" if self.is_root else self.storage


@dataclass(frozen=True)
class CommitPath:
    """Outcome of converting a storage folder to a remote tree path."""

    ok: bool
    path: str = ""
    message: str = ""


@dataclass(frozen=True)
class ResolvedFolder:
    """Both canonical forms of a valid folder."""

    storage: str
    path: str

    def join(self, filename: str) -> str:
        """Full remote path of ``filename`` inside this folder."""
        return f"{self.path}/{filename}" if self.path else filename


def validate_folder_segments(segments: list[str]) -> str | None:
    """Return an error message for the first invalid segment, or None."""
    for seg in segments:
        if not seg:
            return "GitHub: Folder path has an empty segment."
        if seg in (".", ".."):
            return 'GitHub: Folder path cannot include "." or ".." segments.'
        if INVALID_FOLDER_SEGMENT.search(seg):
            return f'GitHub: Folder segment "{seg}" contains invalid characters.'
    return None


def _collapse(value: str) -> str:
    collapsed = re.sub(r"/{2,}", "/", value.replace("\\", "/"))
    return collapsed.strip("/")


def normalize_folder(raw: str | None) -> FolderNormalization:
    """
    Normalize a user-supplied folder into its storage form.

    Examples:
        >>> normalize_folder("tokens//web/").storage
        'tokens/web'
        >>> normalize_folder("./").storage
        '/'
        >>> normalize_folder("..\\\\x").ok
        False
    """
    trimmed = (raw or "").strip()
    if not trimmed:
        return FolderNormalization(ok=True, storage="")
    if trimmed in _ROOT_ALIASES:
        return FolderNormalization(ok=True, storage=ROOT_SENTINEL)

    stripped = _collapse(trimmed)
    if not stripped:
        return FolderNormalization(ok=True, storage=ROOT_SENTINEL)

    segments = stripped.split("/")
    error = validate_folder_segments(segments)
    if error:
        return FolderNormalization(ok=False, message=error)
    return FolderNormalization(ok=True, storage="/".join(segments))


def folder_to_commit_path(stored: str | None) -> CommitPath:
    """Convert a storage-form folder into the literal remote tree path."""
    if not stored or stored in _ROOT_ALIASES:
        return CommitPath(ok=True, path="")

    stripped = _collapse(stored)
    if not stripped:
        return CommitPath(ok=True, path="")

    segments = stripped.split("/")
    error = validate_folder_segments(segments)
    if error:
        return CommitPath(ok=False, message=error)
    return CommitPath(ok=True, path="/".join(segments))


def resolve_folder(raw: str | None) -> ResolvedFolder | str:
    """
    Normalize ``raw`` and derive its commit path in one go.

    Returns:
        ResolvedFolder on success, otherwise the validation message
    """
    normalized = normalize_folder(raw)
    if not normalized.ok:
        return normalized.message
    commit_path = folder_to_commit_path(normalized.storage)
    if not commit_path.ok:
        return commit_path.message
    return ResolvedFolder(storage=normalized.storage, path=commit_path.path)
