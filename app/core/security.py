

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Response

from app.core.config import Settings, settings as default_settings


SESSION_COOKIE_NAME = "sp_auth"
SESSION_COOKIE_MAX_AGE = 12 * 60 * 60  # seconds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionPayload:
    """Decoded contents of the session cookie."""
    token: str
    role: str


def encode_session_cookie(token: str, role: str) -> str:
    """
    Encode the session cookie value.

    Args:
        token: Identity token issued by the identity provider.
        role: Role of the authenticated user.

    Returns:
        str: Base64 text of the compact JSON ``{"t": token, "r": role}``.
    """
    raw = json.dumps({"t": token, "r": role}, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_session_cookie(value: Optional[str]) -> Optional[SessionPayload]:
    """
    Decode a session cookie value produced by ``encode_session_cookie``.

    Args:
        value: Raw cookie value (surrounding quotes are tolerated).

    Returns:
        Optional[SessionPayload]: Decoded payload or None if malformed.
    """
    if not value:
        return None
    try:
        data = json.loads(base64.b64decode(value.strip('"'), validate=True))
    except (binascii.Error, ValueError):
        return None
    if not isinstance(data, dict) or not data.get("t") or not data.get("r"):
        return None
    return SessionPayload(token=str(data["t"]), role=str(data["r"]))


def set_session_cookie(
    response: Response,
    token: str,
    role: str,
    settings: Settings = default_settings,
) -> bool:
    """
    Attach the session cookie to a response.

    The value is base64 and may end in ``=`` padding, so the cookie layer
    may send it double-quoted; ``decode_session_cookie`` strips the quotes.
    Failure to build or place the cookie never fails the caller; it is
    logged and reported through the return value.

    Returns:
        bool: True if the cookie was set.
    """
    try:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=encode_session_cookie(token, role),
            max_age=SESSION_COOKIE_MAX_AGE,
            path="/",
            secure=settings.is_production,
            httponly=True,
            samesite="Lax",
        )
        return True
    except Exception as e:
        logger.warning(f"Failed to set session cookie: {e}")
        return False


def clear_session_cookie(response: Response, settings: Settings = default_settings) -> None:
    """Expire the session cookie immediately, whether or not one was sent."""
    try:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value="",
            max_age=0,
            path="/",
            secure=settings.is_production,
            httponly=True,
            samesite="Lax",
        )
    except Exception as e:
        logger.warning(f"Failed to clear session cookie: {e}")
