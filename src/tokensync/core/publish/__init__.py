"""
Publishing token exports to GitHub: the commit orchestrator, the folder
writability probe and their request/result models.
"""

from tokensync.core.publish.models import (
    CommitRequest,
    CommitResult,
    CreatedPullRequest,
    ExportFilesRequest,
    ExportFilesResult,
    WritabilityResult,
)
from tokensync.core.publish.orchestrator import CommitOrchestrator, serialize_export
from tokensync.core.publish.prober import ensure_folder_writable

__all__ = [
    "CommitOrchestrator",
    "CommitRequest",
    "CommitResult",
    "CreatedPullRequest",
    "ExportFilesRequest",
    "ExportFilesResult",
    "WritabilityResult",
    "ensure_folder_writable",
    "serialize_export",
]
