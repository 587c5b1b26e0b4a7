"""
Pulling token files from GitHub.

``PullService.fetch_tokens`` reads one JSON file from a branch and hands the
parsed document to a TokenImporter.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field

from tokensync.core.export.folders import resolve_folder
from tokensync.core.github.models import RateInfo
from tokensync.core.github.protocol import ForgeClient
from tokensync.core.session.manager import ForgeSession

logger = logging.getLogger(__name__)

SSO_MESSAGE = "GitHub: SSO required for this repository. Authorize your PAT and try again."


class ImportSummary(BaseModel):
    """What an importer did with a pulled document."""

    destination: str | None = None
    token_count: int = 0
    contexts: list[str] = Field(default_factory=list)
    allow_hex_strings: bool = False


class TokenImporter(Protocol):
    """Applies a pulled token document somewhere."""

    def import_tokens(
        self, document: Any, *, allow_hex_strings: bool, contexts: Sequence[str]
    ) -> ImportSummary: ...


def count_tokens(document: Any) -> int:
    if isinstance(document, dict):
        if "$value" in document:
            return 1
        return sum(count_tokens(v) for k, v in document.items() if not k.startswith("$"))
    return 0


class FileTokenImporter:
    """Write pulled documents to a local file, pretty-printed."""

    def __init__(self, destination: Path) -> None:
        self.destination = destination

    def import_tokens(
        self, document: Any, *, allow_hex_strings: bool = False, contexts: Sequence[str] = ()
    ) -> ImportSummary:
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        self.destination.write_text(
            json.dumps(document, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
        logger.info("Wrote pulled tokens to %s", self.destination)
        return ImportSummary(
            destination=str(self.destination),
            token_count=count_tokens(document),
            contexts=list(contexts),
            allow_hex_strings=allow_hex_strings,
        )


class FetchTokensResult(BaseModel):
    ok: bool
    owner: str
    repo: str
    branch: str
    path: str
    status: int | None = None
    message: str | None = None
    saml_required: bool = False
    rate: RateInfo | None = None
    document: Any = None
    summary: ImportSummary | None = None


class PullService:
    """
    Fetch a token file from GitHub and import it.

    Example:
        >>> service = PullService(GitHubClient(), FileTokenImporter(Path("tokens.json")))
        >>> service.fetch_tokens(session, "acme", "design", "main", "tokens/tokens.json").ok
        True
    """

    def __init__(self, client: ForgeClient, importer: TokenImporter) -> None:
        self.client = client
        self.importer = importer

    def fetch_tokens(
        self,
        session: ForgeSession,
        owner: str,
        repo: str,
        branch: str,
        path: str,
        *,
        allow_hex_strings: bool = False,
        contexts: Sequence[str] = (),
    ) -> FetchTokensResult:
        """
        Pull ``path`` from ``owner/repo@branch`` into the importer.

        Returns:
            FetchTokensResult; 401 without a token, 400 for missing or invalid
            arguments, the remote status when the read failed, 422 when the
            file is not valid JSON
        """
        ident = {"owner": owner, "repo": repo, "branch": branch}
        if not session.token:
            return FetchTokensResult(ok=False, path=path, status=401, message="No token", **ident)
        if not owner or not repo or not branch or not (path or "").strip():
            return FetchTokensResult(
                ok=False, path=path, status=400, message="Missing owner/repo/branch/path", **ident
            )

        resolved = resolve_folder(path)
        if isinstance(resolved, str):
            return FetchTokensResult(ok=False, path=path, status=400, message=resolved, **ident)
        remote_path = resolved.path

        res = self.client.get_file_contents(session.token, owner, repo, branch, remote_path)
        if not res.ok:
            if res.saml_required:
                logger.warning(SSO_MESSAGE)
            return FetchTokensResult(
                ok=False,
                path=remote_path,
                status=res.status,
                message=SSO_MESSAGE if res.saml_required else res.message,
                saml_required=res.saml_required,
                rate=res.rate,
                **ident,
            )

        try:
            document = json.loads(res.content_text or "{}")
        except json.JSONDecodeError as e:
            logger.warning("GitHub import failed: %s", e)
            return FetchTokensResult(
                ok=False, path=remote_path, status=422, message=str(e), **ident
            )

        summary = self.importer.import_tokens(
            document, allow_hex_strings=allow_hex_strings, contexts=list(contexts)
        )
        logger.info("Imported tokens from %s/%s@%s:%s", owner, repo, branch, remote_path)
        return FetchTokensResult(
            ok=True,
            path=remote_path,
            status=res.status,
            rate=res.rate,
            document=document,
            summary=summary,
            **ident,
        )
