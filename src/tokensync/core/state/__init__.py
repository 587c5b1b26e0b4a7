"""
Persistent state: key-value stores, the remembered selection and the
last commit signature.
"""

from tokensync.core.state.kv import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    StoreError,
)
from tokensync.core.state.models import CommitSignature, Selection
from tokensync.core.state.store import (
    LAST_COMMIT_KEY,
    REMEMBER_PREF_KEY,
    SELECTED_KEY,
    TOKEN_KEY,
    SaveStateResult,
    SelectionStore,
)

__all__ = [
    "CommitSignature",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LAST_COMMIT_KEY",
    "MemoryKeyValueStore",
    "REMEMBER_PREF_KEY",
    "SELECTED_KEY",
    "SaveStateResult",
    "Selection",
    "SelectionStore",
    "StoreError",
    "TOKEN_KEY",
]
