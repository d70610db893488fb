"""
Security helpers for password hashing, signed tokens and authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC-SHA256 signatures and base64url encoding.  Tokens embed
arbitrary claims, a ``scope`` and an expiration timestamp (``exp``):

* ``api`` tokens are sent by API clients as ``Authorization: Bearer``;
* ``admin`` tokens are stored in the HttpOnly admin session cookie;
* ``reset`` tokens are the password reset codes.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a random salt.
"""

import base64
import hashlib
import hmac
import json
import os
import re
import time
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .db import get_connection

SCOPE_API = "api"
SCOPE_ADMIN = "admin"
SCOPE_RESET = "reset"

ROLE_ADMIN = "ADMIN"

_PBKDF2_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC-SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(
    data: Dict[str, Any], expires_delta: Optional[int] = None, scope: str = SCOPE_API
) -> str:
    """Create a signed JWT token with the given payload.

    The payload is extended with ``scope`` and an ``exp`` field holding
    the expiration time as a UNIX timestamp.  The token is a string of
    the form ``header.payload.signature``, each part base64url encoded.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. ``{"sub": user_id}``).
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.
    scope : str
        What the token may be used for.

    Returns
    -------
    str
        A signed JWT token.
    """
    to_encode = data.copy()
    exp_seconds = expires_delta or settings.access_token_expire_minutes * 60
    to_encode["exp"] = int(time.time()) + exp_seconds
    to_encode["scope"] = scope
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str, scope: str = SCOPE_API) -> Optional[Dict[str, Any]]:
    """Verify and decode a JWT token.

    Verifies the HMAC signature, the ``exp`` field and that the token was
    issued for ``scope``.  Returns the payload dictionary, or ``None``
    when any check fails.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, settings.secret_key)
    try:
        actual_sig = _b64_url_decode(signature_b64)
        # Constant-time comparison to prevent timing attacks
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    if data.get("exp") is None or int(data["exp"]) < int(time.time()):
        return None
    if data.get("scope") != scope:
        return None
    return data


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    Returns the salt and hash in hex, separated by ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a stored salt+hash string."""
    if not hashed_password or "$" not in hashed_password:
        return False
    salt_hex, hash_hex = hashed_password.split("$", 1)
    try:
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)


def check_password_policy(password: str) -> str:
    """Raise ``ValueError`` unless the password is at least 8 characters
    long and contains a digit and an uppercase letter."""
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long.")
    if not re.search(r"\d", password):
        raise ValueError("Password must contain at least one digit.")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter.")
    return password


def password_stamp(hashed_password: Optional[str]) -> str:
    """Short fingerprint of the stored password hash.

    Embedded in reset codes so a code stops working once the password
    has been changed.
    """
    return hashlib.sha256((hashed_password or "").encode("utf-8")).hexdigest()[:16]


def create_reset_token(user_id: str, hashed_password: Optional[str]) -> str:
    return create_access_token(
        {"sub": user_id, "stamp": password_stamp(hashed_password)},
        expires_delta=settings.reset_token_expire_minutes * 60,
        scope=SCOPE_RESET,
    )


def _load_principal(user_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if not user_id:
        return None
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT id, email, role FROM users WHERE id = ?", (user_id,)
        ).fetchone()
    finally:
        conn.close()
    if row is None:
        return None
    return {"sub": row["id"], "user_id": row["id"], "email": row["email"], "role": row["role"]}


security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Dependency that retrieves the current API user from a bearer token.

    Raises HTTP 401 when the header is missing, the token is invalid or
    expired, or the user no longer exists.  Returns a dict with
    ``user_id``, ``email`` and ``role``.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials, scope=SCOPE_API)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    principal = _load_principal(payload.get("sub"))
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def get_session_user(request: Request) -> Dict[str, Any]:
    """Dependency that retrieves the signed-in admin from the session cookie."""
    token = request.cookies.get(settings.session_cookie_name)
    payload = decode_access_token(token, scope=SCOPE_ADMIN) if token else None
    principal = _load_principal(payload.get("sub")) if payload else None
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )
    return principal


def require_admin(current_user: Dict[str, Any] = Depends(get_session_user)) -> Dict[str, Any]:
    """Dependency for admin screens: a signed-in user with the ADMIN role."""
    if current_user.get("role") != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return current_user
