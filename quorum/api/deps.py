"""
quorum.api.deps — FastAPI dependency injection
================================================

The identity collaborator is a bearer JWT issued by whatever auth flow
fronts the app: ``sub`` is the user id and ``name`` the display name.
Quorum only validates the token; it never issues or refreshes one.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError

from quorum.config import QuorumConfig, load_config
from quorum.engine.records import Identity
from quorum.services.context import QuorumContext, build_context

_WEAK_SECRETS = frozenset({
    "quorum-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_config() -> QuorumConfig:
    return load_config(os.getenv("QUORUM_CONFIG", "config.yaml"))


@lru_cache(maxsize=1)
def get_context() -> QuorumContext:
    return build_context(get_config())


def get_identity(
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Validate the bearer token and return the acting user."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    user_id = str(payload.get("sub") or "")
    if not user_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token has no subject")
    return Identity(id=user_id, display_name=str(payload.get("name") or user_id))


ContextDep = Annotated[QuorumContext, Depends(get_context)]
IdentityDep = Annotated[Identity, Depends(get_identity)]
