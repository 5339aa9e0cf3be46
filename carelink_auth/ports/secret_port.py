"""
Secret Port - Interface for reading deployment secrets.

Implementations:
- AWSSecretsAdapter: AWS Secrets Manager
- EnvSecretAdapter: Environment variables (dev only)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class SecretPort(ABC):
    """Port: Read secrets (signing keys, store connection maps)."""

    @abstractmethod
    def retrieve(self, key: str) -> Optional[str]:
        """
        Retrieve a secret string.

        Returns:
            Secret value, or None if not found
        """
        pass

    @abstractmethod
    def get_secret_map(self, secret_id: str) -> Dict[str, Any]:
        """
        Retrieve a JSON secret as a dict.

        Raises:
            KeyError: If the secret does not exist
            ValueError: If the secret is not a JSON object
        """
        pass
