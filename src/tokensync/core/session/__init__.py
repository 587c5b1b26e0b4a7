"""GitHub credential session."""

from tokensync.core.session.manager import (
    AuthResult,
    ForgeSession,
    SessionManager,
    decode_token,
    encode_token,
)

__all__ = [
    "AuthResult",
    "ForgeSession",
    "SessionManager",
    "decode_token",
    "encode_token",
]
