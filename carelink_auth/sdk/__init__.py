from carelink_auth.sdk.session_manager import SessionManager, SessionContext

__all__ = ["SessionManager", "SessionContext"]
