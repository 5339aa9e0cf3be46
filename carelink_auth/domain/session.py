"""
Session Domain Model - Session records and the per-user session index.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import json


_SESSION_KEYS = ("user_id", "roles", "created", "timeout")


@dataclass
class Session:
    """
    Session entity - a token-keyed record binding a user and their roles.

    Domain rules:
    - token is the store key and is not part of the stored value
    - created is reset on refresh, token/user_id/roles never change
    - expiry is enforced by the key-value store TTL, not here
    - keys this model does not know (user_status, UserCreated from older
      writers) are kept in extra and written back unchanged
    """
    token: str
    user_id: int
    roles: Dict[str, str]
    created: int
    timeout: int
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def role_ids(self) -> List[int]:
        """Role ids as integers (roles are keyed by the id string)."""
        return [int(role_id) for role_id in self.roles]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the stored value."""
        data = dict(self.extra)
        data.update({
            "user_id": self.user_id,
            "roles": dict(self.roles),
            "created": self.created,
            "timeout": self.timeout,
        })
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, token: str, data: Dict[str, Any]) -> "Session":
        """Deserialize a stored value. Unknown keys are carried in extra."""
        return cls(
            token=token,
            user_id=int(data["user_id"]),
            roles={str(k): str(v) for k, v in (data.get("roles") or {}).items()},
            created=int(data["created"]),
            timeout=int(data["timeout"]),
            extra={k: v for k, v in data.items() if k not in _SESSION_KEYS},
        )

    @classmethod
    def from_json(cls, token: str, raw: str) -> "Session":
        return cls.from_dict(token, json.loads(raw))


@dataclass
class UserSession:
    """One item of a user's session index: a token and its role ids."""
    token: str
    roles_list: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.token, "roles_list": list(self.roles_list)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSession":
        return cls(
            token=data["token"],
            roles_list=[int(r) for r in (data.get("roles_list") or [])],
        )


@dataclass
class UserSessionIndexEntry:
    """
    The list of live sessions for one user, keyed by the user hash.

    Domain rules:
    - every token listed should have a live Session (best effort)
    - an entry with no sessions is deleted, never stored empty
    """
    user_id_hash: str
    sessions: List[UserSession] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.sessions

    def tokens(self) -> List[str]:
        return [s.token for s in self.sessions]

    def append(self, token: str, roles_list: List[int]) -> None:
        self.sessions.append(UserSession(token=token, roles_list=list(roles_list)))

    def remove(self, token: str) -> bool:
        """
        Remove a token by swapping it with the last item and truncating.

        List order is not preserved.

        Returns:
            True if the token was present
        """
        for i, user_session in enumerate(self.sessions):
            if user_session.token == token:
                self.sessions[i] = self.sessions[-1]
                self.sessions.pop()
                return True
        return False

    def find(self, token: str) -> Optional[UserSession]:
        for user_session in self.sessions:
            if user_session.token == token:
                return user_session
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id_hash": self.user_id_hash,
            "sessions": [s.to_dict() for s in self.sessions],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSessionIndexEntry":
        return cls(
            user_id_hash=data["user_id_hash"],
            sessions=[UserSession.from_dict(s) for s in (data.get("sessions") or [])],
        )

    @classmethod
    def from_json(cls, raw: str) -> "UserSessionIndexEntry":
        return cls.from_dict(json.loads(raw))
