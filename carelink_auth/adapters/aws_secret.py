"""
AWS Secrets Manager Adapter - Deployment secrets from AWS Secrets Manager.
"""

import json
import os
from typing import Any, Dict, Optional

import boto3
import structlog

from carelink_auth.ports.secret_port import SecretPort

logger = structlog.get_logger(__name__)

LOCALSTACK_ENDPOINT = "http://aws-localstack.lh.local:4566"


class AWSSecretsAdapter(SecretPort):
    """
    AWS Secrets Manager secret reader.

    Set AWS_USE_LOCALSTACK=true to point at a LocalStack endpoint with
    static test credentials.
    """

    def __init__(self, region_name: str = "eu-west-2", client=None):
        """
        Initialize AWS Secrets Manager adapter.

        Args:
            region_name: AWS region
            client: Pre-built secretsmanager client (tests)
        """
        self._client = client or self._build_client(region_name)
        self._cache: Dict[str, str] = {}

    @staticmethod
    def _use_localstack() -> bool:
        return os.environ.get("AWS_USE_LOCALSTACK", "").lower() in ("1", "true", "yes")

    def _build_client(self, region_name: str):
        if self._use_localstack():
            return boto3.client(
                "secretsmanager",
                region_name="us-west-2",
                endpoint_url=os.environ.get("AWS_LOCALSTACK_ENDPOINT", LOCALSTACK_ENDPOINT),
                aws_access_key_id="test",
                aws_secret_access_key="test",
            )
        return boto3.client("secretsmanager", region_name=region_name)

    def _secret_string(self, secret_id: str) -> Optional[str]:
        """Fetch once per process; secrets are cached like the Lambda runtime cache."""
        if secret_id in self._cache:
            return self._cache[secret_id]

        try:
            response = self._client.get_secret_value(SecretId=secret_id)
        except self._client.exceptions.ResourceNotFoundException:
            return None

        value = response.get("SecretString")
        if value is not None:
            self._cache[secret_id] = value
        return value

    def retrieve(self, key: str) -> Optional[str]:
        """
        Retrieve a secret string.

        Args:
            key: Secret id or ARN

        Returns:
            SecretString, or None if not found
        """
        return self._secret_string(key)

    def get_secret_map(self, secret_id: str) -> Dict[str, Any]:
        """
        Retrieve a JSON secret as a dict.

        Args:
            secret_id: Secret id or ARN
        """
        value = self._secret_string(secret_id)
        if value is None:
            raise KeyError(f"Unable to get secret {secret_id}")

        try:
            data = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Secret {secret_id} is not valid JSON") from e

        if not isinstance(data, dict):
            raise ValueError(f"Secret {secret_id} is not a JSON object")

        logger.debug("secret_loaded", secret_id=secret_id, keys=sorted(data))
        return data
