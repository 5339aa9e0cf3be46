"""
Token Signer Port - Interface for minting and verifying session tokens.

Implementations:
- JWTSigner: HMAC-signed JWTs (PyJWT)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class TokenSignerPort(ABC):
    """Port: Sign and verify tamper-evident tokens with a symmetric secret."""

    @abstractmethod
    def sign(self, claims: Dict[str, Any], secret: str) -> str:
        """
        Sign claims into a token.

        Raises:
            TokenSigningError: If signing fails
        """
        pass

    @abstractmethod
    def decode(self, token: str, secret: str) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        Raises:
            InvalidTokenError: If the token is malformed or the signature is wrong
        """
        pass
