"""Repository, branch and folder browsing."""

from tokensync.core.browse.service import BrowseService

__all__ = ["BrowseService"]
