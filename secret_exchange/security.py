from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken
from flask import current_app


# ---------------------------------------------------------------------------
# Assignment encryption-at-rest
#
# Goal: who-gives-to-whom should not be readable via the DB in plaintext.
# The server encrypts the receiver exchange id before persisting it; the giver
# id stays plain so a participant can look up their own row.
#
# NOTE: If someone has access to the server environment variables / SECRET_KEY,
# they could still decrypt. This is aimed at casual DB inspection.
# ---------------------------------------------------------------------------


def _assignment_fernet() -> Fernet:
    """Returns a Fernet instance keyed by ASSIGNMENT_ENC_KEY or derived from SECRET_KEY."""
    explicit = (current_app.config.get("ASSIGNMENT_ENC_KEY") or "").strip()
    if explicit:
        # Expect a urlsafe base64-encoded 32-byte key.
        return Fernet(explicit.encode("utf-8"))

    # Derive a stable key from SECRET_KEY so decrypt works across restarts.
    secret = (current_app.config.get("SECRET_KEY") or "").encode("utf-8")
    digest = hashlib.sha256(b"secret-exchange-assignments|" + secret).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_receiver(exchange_id: str) -> str:
    return _assignment_fernet().encrypt(exchange_id.encode("utf-8")).decode("utf-8")


def decrypt_receiver(token: str) -> str:
    """Raises ValueError when the token was not produced with the current key."""
    try:
        return _assignment_fernet().decrypt(token.encode("utf-8")).decode("utf-8")
    except (InvalidToken, ValueError, TypeError) as e:
        raise ValueError("Invalid assignment token") from e


def bearer_token(request) -> str:
    """Token from an `Authorization: Bearer <token>` header, or "" when absent."""
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    return token.strip() if scheme.lower() == "bearer" else ""
