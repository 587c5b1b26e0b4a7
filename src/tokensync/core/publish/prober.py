"""
Remote folder writability check.

A git tree cannot hold a file and a directory under the same name. Before
committing into ``a/b/c`` every prefix (``a``, ``a/b``, ``a/b/c``) is listed
on the target branch, so a file in the way is reported before any write.
"""

from __future__ import annotations

import logging

from tokensync.core.github.protocol import ForgeClient
from tokensync.core.publish.models import WritabilityResult

logger = logging.getLogger(__name__)

SSO_MESSAGE = "GitHub: Authorize SSO for this repository to export into that folder."


def ensure_folder_writable(
    client: ForgeClient,
    token: str,
    owner: str,
    repo: str,
    branch: str,
    folder_path: str,
) -> WritabilityResult:
    """
    Check that ``folder_path`` can hold files on ``branch``.

    The walk stops successfully at the first prefix that does not exist yet
    (404), since the commit will create it.

    Returns:
        WritabilityResult; failures are 409 for a file in the way, 403 when
        SSO authorization is needed, or the listing's own status otherwise
    """
    if not folder_path:
        return WritabilityResult(ok=True)

    prefix = ""
    for segment in (s for s in folder_path.split("/") if s):
        prefix = f"{prefix}/{segment}" if prefix else segment
        res = client.list_dirs(token, owner, repo, branch, prefix)
        if res.ok:
            continue
        status = res.status or 0
        if status == 404:
            logger.debug("Folder %s does not exist yet on %s", prefix, branch)
            break
        if status == 409:
            return WritabilityResult(
                ok=False,
                status=409,
                message=f'GitHub: "{prefix}" is already a file. Choose a different export folder.',
            )
        if res.saml_required:
            return WritabilityResult(ok=False, status=403, message=SSO_MESSAGE)
        return WritabilityResult(
            ok=False, status=status or 400, message=res.message or f"HTTP {status}"
        )
    return WritabilityResult(ok=True)
