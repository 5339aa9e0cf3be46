"""
Stores - The session core's view of its two backing stores.

Key-value:
- SessionRecordStore: Session records keyed by token
- UserSessionIndex: Token lists keyed by user hash

Relational:
- CredentialStore: Users, roles and login-attempt counters
- AuditTrail: session_summaries rows
"""

from carelink_auth.stores.credential_store import CredentialStore
from carelink_auth.stores.session_record_store import SessionRecordStore
from carelink_auth.stores.user_session_index import UserSessionIndex
from carelink_auth.stores.audit_trail import AuditTrail

__all__ = [
    "CredentialStore",
    "SessionRecordStore",
    "UserSessionIndex",
    "AuditTrail",
]
