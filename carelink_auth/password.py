"""
Password Hashing - Deterministic salted hashing and password policy.

The identity's creation timestamp is the salt, so the same (value, created)
pair always hashes to the same string. That lets us:
    1. hash a new password
    2. re-verify a login attempt against the stored hash
    3. derive the user hash that keys the session index, without storing it

Password hashing and user hash derivation are separate functions that share
only salted_hash(), so a password policy change never moves index keys.
"""

import hmac
from typing import Any

from passlib.hash import sha512_crypt

from carelink_auth.errors import HashError, PasswordPolicyError

SHA512_ROUNDS = 5000
MIN_PASSWORD_LENGTH = 10


def salted_hash(value: Any, salt_seed: int) -> str:
    """
    SHA-512-crypt of str(value) salted with salt_seed.

    Args:
        value: Password or user id
        salt_seed: Unix timestamp the identity was created at

    Returns:
        The checksum part of the crypt string (salt and rounds stripped)

    Raises:
        HashError: If the hashing backend rejects the input
    """
    try:
        handler = sha512_crypt.using(salt=str(salt_seed), rounds=SHA512_ROUNDS)
        crypted = handler.hash(str(value))
    except (ValueError, TypeError) as e:
        raise HashError(cause=e)
    return crypted.rsplit("$", 1)[-1]


def secure_compare(given: str, actual: str) -> bool:
    """
    Constant time string comparison.

    When the lengths differ, actual is compared with itself so the call
    costs the same as a same-length compare, and False is returned.
    """
    given_bytes = given.encode("utf-8")
    actual_bytes = actual.encode("utf-8")
    if len(given_bytes) == len(actual_bytes):
        return hmac.compare_digest(given_bytes, actual_bytes)
    hmac.compare_digest(actual_bytes, actual_bytes)
    return False


def validate_password(password: str) -> None:
    """
    Check a new password against the policy.

    Requires at least 10 characters with an uppercase letter, a lowercase
    letter, a number and a non-alphanumeric character.

    Raises:
        PasswordPolicyError: Naming the first rule that failed
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordPolicyError(f"password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not any(c.isupper() for c in password):
        raise PasswordPolicyError("password must contain an uppercase letter")
    if not any(c.islower() for c in password):
        raise PasswordPolicyError("password must contain a lowercase letter")
    if not any(c.isdigit() for c in password):
        raise PasswordPolicyError("password must contain a number")
    if all(c.isalnum() for c in password):
        raise PasswordPolicyError("password must contain a non-alphanumeric character")


class PasswordHasher:
    """Password verification and user hash derivation for the session core."""

    def hash_password(self, password: str, created: int) -> str:
        """Hash a password with the identity's creation timestamp."""
        return salted_hash(password, created)

    def derive_user_hash(self, user_id: int, created: int) -> str:
        """Key of the user's session index entry."""
        return salted_hash(user_id, created)

    def verify_password(self, password: str, created: int, stored_hash: str) -> bool:
        return secure_compare(self.hash_password(password, created), stored_hash)

    secure_compare = staticmethod(secure_compare)
    validate_password = staticmethod(validate_password)
