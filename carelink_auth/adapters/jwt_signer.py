"""
JWT Signer Adapter - Implements TokenSignerPort with HMAC-signed JWTs.
"""

from typing import Any, Dict

import jwt

from carelink_auth.errors import InvalidTokenError, TokenSigningError
from carelink_auth.ports.signer_port import TokenSignerPort


class JWTSigner(TokenSignerPort):
    """
    JWT-based token signer.

    Uses PyJWT. The secret is supplied per call so one signer serves every
    tenant configuration.
    """

    def __init__(self, algorithm: str = "HS256"):
        """
        Initialize JWT signer.

        Args:
            algorithm: JWT algorithm (default HS256)
        """
        self._algorithm = algorithm

    def sign(self, claims: Dict[str, Any], secret: str) -> str:
        """
        Sign claims into a JWT.

        Args:
            claims: Token claims (user_id, roles, iat, rs)
            secret: Symmetric signing secret

        Returns:
            JWT token string
        """
        if not secret:
            raise TokenSigningError("Signing secret is empty")

        try:
            return jwt.encode(claims, secret, algorithm=self._algorithm)
        except (jwt.PyJWTError, TypeError, ValueError, NotImplementedError) as e:
            raise TokenSigningError(cause=e)

    def decode(self, token: str, secret: str) -> Dict[str, Any]:
        """
        Verify a JWT and return its claims.

        Args:
            token: JWT token string
            secret: Symmetric secret used to sign it

        Returns:
            Decoded claims
        """
        if not token:
            raise InvalidTokenError("Token is empty")

        try:
            return jwt.decode(token, secret, algorithms=[self._algorithm])
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(cause=e)
