"""Session cookie shared by the main site and the admin panel subdomain.

The cookie holds a signed JWT identifying the user. It is scoped to the
registered root domain (``.yume.tv`` for both ``yume.tv`` and
``panel.yume.tv``) and lives for a year. Logging out writes an already
expired cookie. A cookie whose signature or expiry does not verify is
treated as no session at all.
"""

import logging
import re
from datetime import timedelta

from fastapi import Request, Response
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from yume.config import Settings, settings
from yume.models import Role, User
from yume.models.base import utcnow

logger = logging.getLogger(__name__)

IPV4_PATTERN = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")


class SessionIdentity(BaseModel):
    """What the token records about the signed-in user.

    The full record is re-read from the document on every request; the token
    only identifies it (and stays well under the browser's size limit).
    """

    id: int
    username: str
    role: Role


def cookie_domain(hostname: str) -> str | None:
    """Root domain to scope the cookie to, None for localhost and IP addresses."""
    hostname = hostname.split(":")[0].lower()
    if not hostname or hostname == "localhost" or IPV4_PATTERN.match(hostname):
        return None
    parts = hostname.split(".")
    if len(parts) < 2:
        return None
    return "." + ".".join(parts[-2:])


def is_admin_panel(hostname: str) -> bool:
    hostname = hostname.split(":")[0].lower()
    return hostname.startswith("panel.") or hostname == "panel.localhost"


def create_session_token(user: User, config: Settings = settings) -> str:
    """Signed token for ``user``, expiring with the cookie."""
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role.value,
        "exp": utcnow() + timedelta(days=config.session_cookie_max_age_days),
    }
    return jwt.encode(claims, config.session_secret, algorithm=config.session_algorithm)


def decode_session_token(token: str, config: Settings = settings) -> SessionIdentity | None:
    """Verify the signature and expiry; None when either check fails."""
    try:
        claims = jwt.decode(token, config.session_secret, algorithms=[config.session_algorithm])
        return SessionIdentity(
            id=int(claims["sub"]), username=claims["username"], role=claims["role"]
        )
    except (JWTError, KeyError, ValueError, ValidationError) as e:
        logger.debug(f"Rejecting session token: {e}")
        return None


def set_session_cookie(
    response: Response, user: User, hostname: str, config: Settings = settings
) -> None:
    response.set_cookie(
        key=config.session_cookie_name,
        value=create_session_token(user, config),
        max_age=config.session_cookie_max_age_days * 24 * 60 * 60,
        path="/",
        domain=cookie_domain(hostname),
        secure=True,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, hostname: str, config: Settings = settings) -> None:
    response.delete_cookie(
        key=config.session_cookie_name,
        path="/",
        domain=cookie_domain(hostname),
        secure=True,
        httponly=True,
        samesite="lax",
    )


def read_session_cookie(request: Request, config: Settings = settings) -> SessionIdentity | None:
    token = request.cookies.get(config.session_cookie_name)
    if not token:
        return None
    return decode_session_token(token, config)
