"""
Security utilities for JWT verification

Tokens are issued by the auth service; this service only verifies them to
learn who the caller is.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, status
from joserfc import jwt as jose_jwt
from joserfc.errors import JoseError
from joserfc.jwk import OctKey
import structlog

from taskboard.core.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class TokenValidationResult:
    subject: str
    claims: dict


class TokenVerifier:
    """Verifies HMAC-signed access tokens"""

    def __init__(self, secret_key: str, algorithm: str) -> None:
        self._jwt_key = OctKey.import_key(secret_key)
        self._algorithm = algorithm
        self._claims_registry = jose_jwt.JWTClaimsRegistry(
            exp={"essential": True},
            sub={"essential": True},
        )

    def validate(self, token: str, token_type: str = "access") -> TokenValidationResult:
        """
        Verify signature, expiry and token type

        Raises:
            HTTPException: 401 if the token is not acceptable
        """
        try:
            token_obj = jose_jwt.decode(token, self._jwt_key, algorithms=[self._algorithm])
            self._claims_registry.validate(token_obj.claims)
        except (JoseError, ValueError) as exc:
            logger.warning("JWT verification failed", error=str(exc))
            raise _unauthorized("Could not validate credentials")

        payload = token_obj.claims
        if payload.get("type", token_type) != token_type:
            logger.warning("Invalid token type", expected=token_type, actual=payload.get("type"))
            raise _unauthorized("Invalid token type")

        subject = str(payload["sub"])
        logger.debug("Token verified successfully", subject=subject, type=token_type)
        return TokenValidationResult(subject=subject, claims=dict(payload))


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


_token_verifier = TokenVerifier(settings.JWT_SECRET_KEY, settings.JWT_ALGORITHM)


def verify_token(token: str, token_type: str = "access") -> str:
    """
    Verify JWT token and return subject

    Raises:
        HTTPException: If token is invalid or expired
    """
    return _token_verifier.validate(token, token_type=token_type).subject


def subject_from_token(token: Optional[str]) -> Optional[str]:
    """Subject of a valid access token, None otherwise (for WebSocket handshakes)"""
    if not token:
        return None
    try:
        return verify_token(token)
    except HTTPException:
        return None
