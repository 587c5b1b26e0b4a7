"""Validation of export filenames."""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_FILENAME = "tokens.json"
MAX_FILENAME_LENGTH = 128
INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_JSON_SUFFIX = re.compile(r"\.json$", re.IGNORECASE)


@dataclass(frozen=True)
class FilenameValidation:
    """Outcome of validating a target filename."""

    ok: bool
    filename: str = ""
    message: str = ""


def validate_filename(raw: str | None) -> FilenameValidation:
    """
    Validate the filename a token export is written to.

    ``None`` means "not chosen" and falls back to ``tokens.json``.
    The name is trimmed; it must be 1-128 characters, must not be ``.`` or
    ``..``, must not contain path separators, reserved or control characters,
    and must end with ``.json`` (any case).
    """
    initial = raw if isinstance(raw, str) else DEFAULT_FILENAME
    trimmed = initial.strip()
    if not trimmed:
        return FilenameValidation(
            ok=False, message="GitHub: Enter a filename (e.g., tokens.json)."
        )
    if trimmed in (".", ".."):
        return FilenameValidation(ok=False, message='GitHub: Filename cannot be "." or "..".')
    if len(trimmed) > MAX_FILENAME_LENGTH:
        return FilenameValidation(
            ok=False,
            message=f"GitHub: Filename must be {MAX_FILENAME_LENGTH} characters or fewer.",
        )
    if INVALID_FILENAME_CHARS.search(trimmed):
        return FilenameValidation(
            ok=False,
            message='GitHub: Filename contains unsupported characters like / \\ : * ? " < > |.',
        )
    if not _JSON_SUFFIX.search(trimmed):
        return FilenameValidation(ok=False, message="GitHub: Filename must end with .json.")
    return FilenameValidation(ok=True, filename=trimmed)
