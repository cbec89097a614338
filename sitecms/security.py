"""Password hashing, bearer tokens and the per-route permission check."""

import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, request
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import Forbidden, Unauthorized
from .models import Role

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def create_access_token(user) -> str:
    """Sign a time-limited token carrying the user's identity and role."""
    now = datetime.now(timezone.utc)
    role = user.live_role
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role_id": user.role_id,
        "role": role.name if role else None,
        "iat": now,
        "exp": now + timedelta(hours=current_app.config["JWT_EXPIRES_HOURS"]),
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Return the token claims; any failure is reported as Unauthorized."""
    try:
        return jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError:
        raise Unauthorized("Invalid or expired token")


def _bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Authorization header required")
    return token.strip()


def authenticate_request():
    claims = decode_access_token(_bearer_token())
    try:
        g.user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise Unauthorized("Invalid or expired token")
    g.role_id = claims.get("role_id")
    g.claims = claims
    return claims


def role_has_permission(role_id, name: str) -> bool:
    if role_id is None:
        return False
    role = Role.get_alive(role_id)
    if role is None:
        return False
    return name in role.permission_names()


def auth_required(view):
    """Require a valid bearer token, whatever the caller's role."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        authenticate_request()
        return view(*args, **kwargs)

    return wrapped


def permission_required(name: str):
    """Require a valid bearer token whose role holds permission ``name``."""

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            authenticate_request()
            if not role_has_permission(g.role_id, name):
                logger.info("Permission %s denied for user %s", name, g.user_id)
                raise Forbidden("Permission denied")
            return view(*args, **kwargs)

        return wrapped

    return decorator
