"""
Adapters - Implementations of ports.

Key-Value Stores:
- RedisKeyValueAdapter: Redis-backed TTL storage
- MemoryKeyValueAdapter: In-memory TTL storage (testing)

Relational:
- SQLAlchemyExecutor: Parameterized SQL on a SQLAlchemy engine

Tokens:
- JWTSigner: HMAC-signed JWT tokens

Secrets:
- AWSSecretsAdapter: AWS Secrets Manager
- EnvSecretAdapter: Environment variables (dev only)
"""

from carelink_auth.adapters.redis_kv import RedisKeyValueAdapter
from carelink_auth.adapters.memory_kv import MemoryKeyValueAdapter
from carelink_auth.adapters.sqlalchemy_executor import SQLAlchemyExecutor
from carelink_auth.adapters.jwt_signer import JWTSigner
from carelink_auth.adapters.aws_secret import AWSSecretsAdapter
from carelink_auth.adapters.env_secret import EnvSecretAdapter

__all__ = [
    "RedisKeyValueAdapter",
    "MemoryKeyValueAdapter",
    "SQLAlchemyExecutor",
    "JWTSigner",
    "AWSSecretsAdapter",
    "EnvSecretAdapter",
]
