"""Pulling token files from GitHub."""

from tokensync.core.pull.service import (
    FetchTokensResult,
    FileTokenImporter,
    ImportSummary,
    PullService,
    TokenImporter,
)

__all__ = [
    "FetchTokensResult",
    "FileTokenImporter",
    "ImportSummary",
    "PullService",
    "TokenImporter",
]
