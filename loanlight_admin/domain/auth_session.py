"""Process-wide auth session tracking as an explicit state machine"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from loanlight_admin.config import settings

logger = logging.getLogger(__name__)


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    BRANCH_MANAGER = "BRANCH_MANAGER"
    LOAN_OFFICER = "LOAN_OFFICER"
    ACCOUNTANT = "ACCOUNTANT"
    TELLER = "TELLER"


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class AuthEventType(str, Enum):
    """Events emitted by the backend auth service"""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    SIGNED_OUT = "SIGNED_OUT"
    ERROR = "ERROR"


@dataclass
class AuthUser:
    """Signed-in staff member (profile row joined with the auth user)"""

    id: str
    email: str
    name: str
    role: UserRole
    branch: Optional[str] = None
    avatar: Optional[str] = None


@dataclass
class AuthEvent:
    type: AuthEventType
    user: Optional[AuthUser] = None
    reason: Optional[str] = None


class AuthSession:
    """
    Tracks the auth session of the dashboard.

    States:
    - UNAUTHENTICATED: no session
    - CHECKING: a session lookup is in flight; expires after `check_timeout` seconds
    - AUTHENTICATED: `user` is set
    - FAILED: `reason` is set; a new check or sign-in recovers

    The session is driven only by `begin_check()`, `handle()` and `expire()`; the
    clock is injectable for tests.
    """

    def __init__(self, check_timeout: float | None = None, clock: Callable[[], float] = time.monotonic):
        self.check_timeout = check_timeout or settings.auth_check_timeout_seconds
        self._clock = clock
        self.state = SessionState.UNAUTHENTICATED
        self.user: Optional[AuthUser] = None
        self.reason: Optional[str] = None
        self._deadline: Optional[float] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        self.expire()
        return self.state is SessionState.CHECKING

    def begin_check(self) -> None:
        """Start looking up an existing session"""
        self._transition(SessionState.CHECKING)
        self._deadline = self._clock() + self.check_timeout

    def handle(self, event: AuthEvent) -> SessionState:
        """Apply one auth event and return the resulting state"""
        self.expire()

        if event.type is AuthEventType.ERROR:
            self._fail(event.reason or "Authentication error")
        elif event.type is AuthEventType.SIGNED_OUT:
            self._transition(SessionState.UNAUTHENTICATED)
        elif event.user is not None:
            self._transition(SessionState.AUTHENTICATED, user=event.user)
        elif event.type is AuthEventType.INITIAL_SESSION:
            self._transition(SessionState.UNAUTHENTICATED)
        elif event.type is AuthEventType.SIGNED_IN:
            self._fail("Signed in but no user profile was found")
        # TOKEN_REFRESHED / USER_UPDATED without a user keep the current state

        return self.state

    def expire(self) -> None:
        """Fail a check that has outlived its deadline"""
        if self.state is SessionState.CHECKING and self._deadline is not None and self._clock() >= self._deadline:
            self._fail(f"Session check timed out after {self.check_timeout}s")

    def _fail(self, reason: str) -> None:
        logger.warning("Auth session failed", extra={"reason": reason})
        self._transition(SessionState.FAILED, reason=reason)

    def _transition(
        self,
        state: SessionState,
        user: Optional[AuthUser] = None,
        reason: Optional[str] = None,
    ) -> None:
        logger.debug("Auth session %s -> %s", self.state.value, state.value)
        self.state = state
        self.user = user
        self.reason = reason
        if state is not SessionState.CHECKING:
            self._deadline = None
