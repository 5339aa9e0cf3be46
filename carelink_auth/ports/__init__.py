"""
Ports - Interfaces for the stores and services the session core talks to.

Hexagonal architecture: These define WHAT we need, not HOW.
Adapters provide the HOW.
"""

from carelink_auth.ports.kv_port import KeyValuePort
from carelink_auth.ports.sql_port import SQLExecutorPort
from carelink_auth.ports.signer_port import TokenSignerPort
from carelink_auth.ports.secret_port import SecretPort

__all__ = [
    "KeyValuePort",
    "SQLExecutorPort",
    "TokenSignerPort",
    "SecretPort",
]
