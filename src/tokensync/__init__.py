"""
tokensync - publish design tokens to GitHub

Commits exported design-token files to a GitHub repository only when their
content changed, and pulls token files back.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from tokensync.core.config.models import TokensyncConfig
from tokensync.core.publish.models import CommitRequest, CommitResult

__all__ = ["CommitRequest", "CommitResult", "TokensyncConfig", "__version__"]
