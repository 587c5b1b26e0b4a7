"""
Selection and commit-signature store.

Wraps a KeyValueStore with the fallback policy tokensync relies on: a
failing read is treated as "nothing stored" and a failing write is
dropped. Both are logged at debug level and never raised, so a broken or
read-only store degrades remembered state without breaking a commit.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from tokensync.core.export.folders import normalize_folder
from tokensync.core.export.models import Scope
from tokensync.core.state.kv import KeyValueStore, StoreError
from tokensync.core.state.models import CommitSignature, Selection

logger = logging.getLogger(__name__)

SELECTED_KEY = "gh.selected"
LAST_COMMIT_KEY = "gh.lastCommitSignature"
TOKEN_KEY = "github_token_b64"
REMEMBER_PREF_KEY = "githubRememberPref"

_STRING_FIELDS = (
    "owner",
    "repo",
    "branch",
    "commit_message",
    "collection",
    "mode",
    "pr_base",
    "pr_title",
    "pr_body",
)
_BOOL_FIELDS = ("style_dictionary", "flat_tokens", "create_pr")
_SCOPE_VALUES = {s.value for s in Scope}


@dataclass(frozen=True)
class SaveStateResult:
    """Selection after a save_state call, plus a folder warning if any."""

    selection: Selection
    message: str | None = None


class SelectionStore:
    """
    Typed access to the remembered selection and last commit signature.

    Example:
        >>> store = SelectionStore(MemoryKeyValueStore())
        >>> store.merge_selected({"owner": "acme", "repo": "design"}).repo
        'design'
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    # Fallback policy

    def read(self, key: str) -> Any:
        """Read ``key``; a store failure reads as None."""
        try:
            return self.kv.get(key)
        except (StoreError, OSError) as e:
            logger.debug("Ignoring store read failure for %s: %s", key, e)
            return None

    def write(self, key: str, value: Any) -> bool:
        """Write ``key``; returns False when the store failed."""
        try:
            self.kv.set(key, value)
            return True
        except (StoreError, OSError) as e:
            logger.debug("Ignoring store write failure for %s: %s", key, e)
            return False

    def remove(self, key: str) -> bool:
        """Delete ``key``; returns False when the store failed."""
        try:
            self.kv.delete(key)
            return True
        except (StoreError, OSError) as e:
            logger.debug("Ignoring store delete failure for %s: %s", key, e)
            return False

    # Selection

    def get_selected(self) -> Selection:
        raw = self.read(SELECTED_KEY)
        if not isinstance(raw, dict):
            return Selection()
        try:
            return Selection.model_validate(raw)
        except ValidationError as e:
            bad = {err["loc"][0] for err in e.errors() if err.get("loc")}
            logger.debug("Dropping invalid stored selection fields: %s", sorted(map(str, bad)))
            return Selection.model_validate({k: v for k, v in raw.items() if k not in bad})

    def set_selected(self, selection: Selection) -> None:
        self.write(SELECTED_KEY, selection.to_storage())

    def merge_selected(self, partial: Mapping[str, Any]) -> Selection:
        """
        Shallow-merge ``partial`` over the stored selection and store it.

        A None value in ``partial`` clears that field.
        """
        current = self.get_selected().model_dump(exclude_none=True)
        merged = Selection.model_validate({**current, **dict(partial)})
        self.set_selected(merged)
        return merged

    def save_state(self, update: Mapping[str, Any]) -> SaveStateResult:
        """
        Merge a loosely-typed update field by field.

        Only values of the expected type are taken: strings for text fields,
        booleans for flags, a known scope, a trimmed filename, and a folder
        that normalizes cleanly. An invalid folder is skipped and its
        validation message returned.
        """
        partial: dict[str, Any] = {}
        message = None

        for name in _STRING_FIELDS:
            if isinstance(update.get(name), str):
                partial[name] = update[name]
        for name in _BOOL_FIELDS:
            if isinstance(update.get(name), bool):
                partial[name] = update[name]
        if update.get("scope") in _SCOPE_VALUES:
            partial["scope"] = Scope(update["scope"])
        if isinstance(update.get("filename"), str):
            partial["filename"] = update["filename"].strip()
        if isinstance(update.get("folder"), str):
            normalized = normalize_folder(update["folder"])
            if normalized.ok:
                partial["folder"] = normalized.storage
            else:
                message = normalized.message

        return SaveStateResult(selection=self.merge_selected(partial), message=message)

    # Commit signature

    def get_last_commit_signature(self) -> CommitSignature | None:
        raw = self.read(LAST_COMMIT_KEY)
        if not isinstance(raw, dict):
            return None
        branch = raw.get("branch")
        full_path = raw.get("full_path")
        if not isinstance(branch, str) or not isinstance(full_path, str):
            return None
        scope = raw.get("scope")
        return CommitSignature(
            branch=branch,
            full_path=full_path,
            scope=Scope(scope) if scope in _SCOPE_VALUES else Scope.SELECTED,
        )

    def set_last_commit_signature(self, signature: CommitSignature) -> None:
        self.write(LAST_COMMIT_KEY, signature.model_dump(mode="json"))

    def clear_last_commit_signature(self) -> None:
        self.remove(LAST_COMMIT_KEY)
