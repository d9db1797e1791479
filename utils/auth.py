# utils/auth.py
"""
Authentication Manager for Streamlit Apps

Version: 1.0.0
Features:
- Email one-time passcode login (6 digits, salted SHA256 at rest), limited guesses per code
- Role derived from the employee directory on every login
- Explicit SessionContext handed to pages (no deep global lookups)
- Session management with timeout; logout clears session and result cache
"""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, MutableMapping, Optional, Tuple

import streamlit as st

from .config import config
from .otp_email import OtpEmailService
from .sample_order_reporting.cache import ResultCache
from .sample_order_reporting.constants import LOGIN_TEAMS, STATUS_ACTIVE
from .sample_order_reporting.directory import HierarchyDirectory, classify_role
from .sample_order_reporting.models import ViewerRole

logger = logging.getLogger(__name__)

SESSION_KEY = 'auth_session'
PENDING_OTP_KEY = 'auth_pending_otp'
OTP_LENGTH = 6


@dataclass
class SessionContext:
    """Who is logged in and what they may see. Built once per login."""
    email: str
    name: str
    role: ViewerRole
    login_time: datetime
    employee: Dict = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'email': self.email,
            'name': self.name,
            'role': self.role.value,
            'login_time': self.login_time.isoformat(),
            'employee': dict(self.employee),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'SessionContext':
        return cls(
            email=data['email'],
            name=data.get('name') or data['email'],
            role=ViewerRole(data['role']),
            login_time=datetime.fromisoformat(data['login_time']),
            employee=dict(data.get('employee') or {}),
        )


class AuthManager:
    """
    Authentication manager for Streamlit apps

    Usage:
        auth = AuthManager()
        ok, result = auth.request_otp(email)
        ok, result = auth.verify_otp(email, code)   # result: SessionContext or {"error": ...}

        session = auth.require_auth()               # on every protected page
    """

    def __init__(
        self,
        store: Optional[MutableMapping] = None,
        directory: HierarchyDirectory = None,
        email_service: OtpEmailService = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.store = store if store is not None else st.session_state
        self._directory = directory
        self._email_service = email_service
        self._clock = clock
        self.session_timeout = timedelta(hours=config.get_app_setting("SESSION_TIMEOUT_HOURS", 8))
        self.otp_ttl = timedelta(minutes=config.get_app_setting("OTP_TTL_MINUTES", 10))
        self.max_otp_attempts = config.get_app_setting("OTP_MAX_ATTEMPTS", 5)

    @property
    def directory(self) -> HierarchyDirectory:
        if self._directory is None:
            self._directory = HierarchyDirectory()
        return self._directory

    @property
    def email_service(self) -> OtpEmailService:
        if self._email_service is None:
            self._email_service = OtpEmailService()
        return self._email_service

    # ==================== PASSCODE HASHING ====================

    def hash_code(self, code: str, salt: str = None) -> Tuple[str, str]:
        """
        Hash passcode with SHA256 + salt

        Returns:
            Tuple of (hash, salt)
        """
        if not salt:
            salt = secrets.token_hex(32)

        code_hash = hashlib.sha256((code + salt).encode()).hexdigest()
        return code_hash, salt

    def verify_code(self, code: str, stored_hash: str, salt: str) -> bool:
        code_hash, _ = self.hash_code(code, salt)
        return hmac.compare_digest(code_hash, stored_hash)

    @staticmethod
    def generate_code() -> str:
        return ''.join(secrets.choice('0123456789') for _ in range(OTP_LENGTH))

    # ==================== AUTHENTICATION ====================

    def request_otp(self, email: str) -> Tuple[bool, Dict]:
        """
        Issue a passcode for a known, active Sales / Program Team user.

        Returns:
            Tuple of (success, {"message": ...} or {"error": ...})
        """
        email = (email or '').strip()
        if not email:
            return False, {"error": "Please enter your email"}

        try:
            employee = self.directory.get_employee(email)
        except Exception as e:
            logger.error(f"Directory lookup failed during login: {e}")
            return False, {"error": "Something went wrong. Please try again."}

        if (
            not employee
            or employee.get('status') != STATUS_ACTIVE
            or employee.get('team') not in LOGIN_TEAMS
        ):
            logger.warning(f"Passcode requested for unknown or inactive user: {email}")
            return False, {"error": "User not found or inactive. Please contact administrator."}

        code = self.generate_code()
        code_hash, salt = self.hash_code(code)
        ttl_minutes = int(self.otp_ttl.total_seconds() // 60)

        sent, message = self.email_service.send_otp(email, employee.get('name'), code, ttl_minutes)
        if not sent:
            return False, {"error": message or "Failed to send OTP. Please try again."}

        self.store[PENDING_OTP_KEY] = {
            'email': email,
            'hash': code_hash,
            'salt': salt,
            'expires_at': (self._clock() + self.otp_ttl).isoformat(),
            'attempts': 0,
        }
        logger.info(f"Passcode issued for {email}")
        return True, {"message": f"A {OTP_LENGTH}-digit code was sent to {email}"}

    def verify_otp(self, email: str, code: str):
        """
        Check the passcode, classify the role and start the session.

        Returns:
            (True, SessionContext) or (False, {"error": ...})
        """
        email = (email or '').strip()
        code = (code or '').strip()
        pending = self.store.get(PENDING_OTP_KEY)

        if (
            not pending
            or pending.get('email') != email
            or len(code) != OTP_LENGTH
            or not code.isdigit()
            or self._clock() > datetime.fromisoformat(pending['expires_at'])
            or not self.verify_code(code, pending['hash'], pending['salt'])
        ):
            logger.warning(f"Invalid or expired passcode for {email}")
            if pending and pending.get('email') == email:
                self._record_failed_attempt(pending)
            return False, {"error": "Invalid or expired OTP. Please try again."}

        self.store.pop(PENDING_OTP_KEY, None)

        role = classify_role(self.directory, email)
        if role is None:
            return False, {"error": "Unable to determine user type. Please contact administrator."}

        try:
            employee = self.directory.get_employee(email) or {}
        except Exception as e:
            logger.error(f"Directory lookup failed after verification: {e}")
            return False, {"error": "Login failed. Please try again."}

        context = SessionContext(
            email=email,
            name=employee.get('name') or email,
            role=role,
            login_time=self._clock(),
            employee={k: v for k, v in employee.items() if v is not None},
        )
        self.login(context)
        return True, context

    def _record_failed_attempt(self, pending: Dict):
        """Count a wrong guess; the pending code is dropped once attempts run out."""
        attempts = pending.get('attempts', 0) + 1
        if attempts >= self.max_otp_attempts:
            self.store.pop(PENDING_OTP_KEY, None)
            logger.warning(f"Passcode discarded after {attempts} failed attempts for {pending.get('email')}")
            return
        self.store[PENDING_OTP_KEY] = {**pending, 'attempts': attempts}

    # ==================== SESSION MANAGEMENT ====================

    def login(self, context: SessionContext):
        """Persist the session context after successful verification"""
        self.store[SESSION_KEY] = context.to_dict()
        logger.info(f"User {context.email} logged in as {context.role.value}")

    def get_session(self) -> Optional[SessionContext]:
        """Hydrate the session context from the store; None if absent, corrupt or expired."""
        data = self.store.get(SESSION_KEY)
        if not data:
            return None

        try:
            context = SessionContext.from_dict(data)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Discarding unreadable session: {e}")
            self.logout()
            return None

        if self._clock() - context.login_time > self.session_timeout:
            logger.info(f"Session expired for user: {context.email}")
            self.logout()
            return None

        return context

    def check_session(self) -> bool:
        return self.get_session() is not None

    def logout(self):
        """Clear session, pending passcode and cached results"""
        data = self.store.get(SESSION_KEY) or {}
        for key in (SESSION_KEY, PENDING_OTP_KEY):
            self.store.pop(key, None)

        ResultCache(self.store).clear()
        logger.info(f"User {data.get('email', 'Unknown')} logged out")

    # ==================== ACCESS CONTROL ====================

    def require_auth(self) -> SessionContext:
        """
        Require authentication to access a page.
        Use at the beginning of each protected page.
        """
        context = self.get_session()
        if context is None:
            st.warning("⚠️ Please login to access this page")
            st.stop()
        return context


__all__ = [
    'AuthManager',
    'SessionContext',
]
