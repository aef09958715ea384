"""Bearer-token auth for the reply service.

Owners exchange an API key for a short-lived JWT. The token subject is the
owner id, and every owner-scoped route reads it from there.
"""

from __future__ import annotations

import time

import jwt
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from huddle_engine.config.settings import Settings
from huddle_engine.observability.logger import get_logger

logger = get_logger("auth")

router = APIRouter(prefix="/auth", tags=["auth"])
bearer_scheme = HTTPBearer()


class TokenRequest(BaseModel):
    api_key: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


def parse_api_keys(raw: str) -> dict[str, str]:
    """Map api_key -> owner_id from a comma-separated ``owner_id:api_key`` list."""
    keys: dict[str, str] = {}
    for pair in raw.split(","):
        owner_id, sep, api_key = pair.strip().partition(":")
        if sep and owner_id.strip() and api_key.strip():
            keys[api_key.strip()] = owner_id.strip()
    return keys


def issue_token(owner_id: str, settings: Settings) -> str:
    issued_at = int(time.time())
    claims = {"sub": owner_id, "iat": issued_at, "exp": issued_at + settings.jwt_expiry_minutes * 60}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


@router.post("/token", response_model=TokenResponse)
async def create_token(body: TokenRequest, request: Request) -> TokenResponse:
    settings: Settings = request.app.state.settings
    owners_by_key = parse_api_keys(settings.api_keys)
    if not owners_by_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication not configured",
        )

    owner_id = owners_by_key.get(body.api_key)
    if owner_id is None:
        logger.warning("invalid_api_key_attempt")
        raise _unauthorized("Invalid API key")

    logger.info("token_issued", owner_id=owner_id, expiry_minutes=settings.jwt_expiry_minutes)
    return TokenResponse(
        access_token=issue_token(owner_id, settings),
        expires_in=settings.jwt_expiry_minutes * 60,
    )


async def verify_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> dict:
    """Decoded claims of a valid bearer token that names an owner."""
    settings: Settings = request.app.state.settings
    try:
        claims = jwt.decode(
            credentials.credentials, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    if not claims.get("sub"):
        raise _unauthorized("Token has no subject")
    return claims
