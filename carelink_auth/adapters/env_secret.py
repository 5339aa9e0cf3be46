"""
Environment Variable Secret Adapter - Secrets from environment variables.

WARNING: For development only. Use AWS Secrets Manager in production.
"""

import json
import os
from typing import Any, Dict, Optional

from carelink_auth.ports.secret_port import SecretPort


class EnvSecretAdapter(SecretPort):
    """
    Environment variable-based secret reader.

    Secret "redis" is read from CARELINK_REDIS. JSON secrets hold a JSON
    object, e.g. CARELINK_REDIS='{"host": "localhost", "port": "6379", "sessions_db": "0"}'.
    """

    def __init__(self, prefix: str = "CARELINK_"):
        """
        Initialize env secret adapter.

        Args:
            prefix: Prefix for environment variables (default CARELINK_)
        """
        self._prefix = prefix

    def _env_key(self, key: str) -> str:
        """Convert secret key to env var name."""
        return f"{self._prefix}{key.upper().replace('-', '_').replace('/', '_')}"

    def retrieve(self, key: str) -> Optional[str]:
        return os.environ.get(self._env_key(key))

    def get_secret_map(self, secret_id: str) -> Dict[str, Any]:
        value = self.retrieve(secret_id)
        if value is None:
            raise KeyError(f"Unable to get secret {secret_id}")

        data = json.loads(value)
        if not isinstance(data, dict):
            raise ValueError(f"Secret {secret_id} is not a JSON object")
        return data
