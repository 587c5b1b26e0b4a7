"""
GitHub session handling.

A ``ForgeSession`` carries the credential for one caller and is passed
explicitly into every service call. ``SessionManager`` sets, verifies,
remembers and forgets that credential.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

from pydantic import BaseModel

from tokensync.core.github.protocol import ForgeClient
from tokensync.core.state.store import REMEMBER_PREF_KEY, TOKEN_KEY, SelectionStore

logger = logging.getLogger(__name__)


@dataclass
class ForgeSession:
    """Credential holder owned by the caller's session lifecycle."""

    token: str | None = None

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    def clear(self) -> None:
        self.token = None


class AuthResult(BaseModel):
    """Outcome of setting or restoring a token."""

    ok: bool
    login: str | None = None
    name: str | None = None
    remember: bool = False
    error: str | None = None


def encode_token(token: str) -> str:
    return base64.b64encode(token.encode("utf-8")).decode("ascii")


def decode_token(stored: str) -> str:
    """Decode a remembered token, passing undecodable values through."""
    try:
        return base64.b64decode(stored.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return stored


class SessionManager:
    """
    Manage the GitHub credential of a ForgeSession.

    Example:
        >>> manager = SessionManager(GitHubClient(), SelectionStore(kv))
        >>> session = ForgeSession()
        >>> manager.set_token(session, "ghp_...", remember=True).login
        'octocat'
    """

    def __init__(self, client: ForgeClient, store: SelectionStore) -> None:
        self.client = client
        self.store = store

    def _verify(self, token: str, remember: bool) -> AuthResult:
        who = self.client.get_user(token)
        if who.ok and who.user is not None:
            return AuthResult(ok=True, login=who.user.login, name=who.user.name, remember=remember)
        logger.warning("GitHub authentication failed: %s", who.message)
        return AuthResult(ok=False, error=who.message or "authentication failed")

    def set_token(self, session: ForgeSession, token: str, remember: bool = False) -> AuthResult:
        """
        Put ``token`` into ``session`` and verify it.

        Args:
            session: Session receiving the credential
            token: GitHub personal access token
            remember: Persist the token for later ``restore`` calls

        Returns:
            AuthResult with the user's login on success
        """
        token = (token or "").strip()
        if not token:
            return AuthResult(ok=False, error="empty token")

        session.token = token
        self.store.write(REMEMBER_PREF_KEY, remember)
        if remember:
            self.store.write(TOKEN_KEY, encode_token(token))
        else:
            self.store.remove(TOKEN_KEY)
        return self._verify(token, remember)

    def forget_token(self, session: ForgeSession) -> None:
        """Clear the session credential and the remembered token."""
        session.clear()
        self.store.remove(TOKEN_KEY)

    def remember_pref(self) -> bool:
        stored = self.store.read(REMEMBER_PREF_KEY)
        return stored if isinstance(stored, bool) else True

    def stored_token(self) -> str | None:
        stored = self.store.read(TOKEN_KEY)
        if not isinstance(stored, str) or not stored:
            return None
        return decode_token(stored)

    def restore(self, session: ForgeSession) -> AuthResult | None:
        """
        Load the remembered token into ``session`` and verify it.

        Returns:
            None when nothing is remembered (or remembering is switched off),
            otherwise the verification result
        """
        if not self.remember_pref():
            self.store.remove(TOKEN_KEY)
            return None
        token = self.stored_token()
        if token is None:
            return None
        session.token = token
        return self._verify(token, remember=True)
