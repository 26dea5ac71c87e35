# platform_common/auth.py

import jwt
from fastapi import Request
from pydantic import BaseModel, ConfigDict
from typing import Optional, Union

from .errors import Unauthenticated

NO_TOKEN_MESSAGE = "No token provided"
INVALID_TOKEN_MESSAGE = "Invalid token"


class Claims(BaseModel):
    model_config = ConfigDict(extra="allow")

    userId: int
    iat: Optional[Union[int, float]] = None
    exp: Union[int, float]


class AuthContext(BaseModel):
    """Verified claims plus the credential exactly as the caller sent it."""

    claims: Claims
    authorization: str

    @property
    def user_id(self) -> int:
        return self.claims.userId


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthenticated(NO_TOKEN_MESSAGE)
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthenticated(NO_TOKEN_MESSAGE)
    return parts[1]


class TokenVerifier:
    """
    Checks signed bearer tokens against a shared secret.

    Every service builds its own instance from its own configuration, so the
    secret never lives in module state here.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("TokenVerifier requires a non-empty secret")
        self._secret = secret
        self._algorithm = algorithm

    def verify(self, authorization: Optional[str]) -> Claims:
        token = extract_bearer_token(authorization)
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except jwt.InvalidTokenError:
            # Covers bad signatures, expiry and malformed tokens alike.
            raise Unauthenticated(INVALID_TOKEN_MESSAGE)
        if payload.get("userId") is None:
            raise Unauthenticated(INVALID_TOKEN_MESSAGE)
        try:
            return Claims(**payload)
        except ValueError:
            raise Unauthenticated(INVALID_TOKEN_MESSAGE)

    def dependency(self):
        """FastAPI dependency yielding an AuthContext for the current request."""

        def require_auth(request: Request) -> AuthContext:
            authorization = request.headers.get("authorization")
            claims = self.verify(authorization)
            return AuthContext(claims=claims, authorization=authorization)

        return require_auth
