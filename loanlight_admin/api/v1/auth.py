"""/v1/auth/* - dashboard auth session state, driven by events from the auth backend"""

from fastapi import APIRouter, Depends

from loanlight_admin.api.dependencies import get_auth_session
from loanlight_admin.api.v1.schemas import AuthEventRequest, AuthSessionResponse
from loanlight_admin.domain.auth_session import AuthEvent, AuthSession, AuthUser

router = APIRouter()


def session_response(session: AuthSession) -> AuthSessionResponse:
    # Settle an expired check before reading the state
    session.expire()
    return AuthSessionResponse.model_validate(session, from_attributes=True)


@router.get("/auth/session", response_model=AuthSessionResponse)
async def get_session(session: AuthSession = Depends(get_auth_session)):
    return session_response(session)


@router.post("/auth/check", response_model=AuthSessionResponse)
async def begin_check(session: AuthSession = Depends(get_auth_session)):
    """Mark a session lookup as in flight; it fails if no event settles it in time"""
    session.begin_check()
    return session_response(session)


@router.post("/auth/events", response_model=AuthSessionResponse)
async def handle_event(request_body: AuthEventRequest, session: AuthSession = Depends(get_auth_session)):
    """Apply one auth event (sign in, sign out, token refresh...) and return the new state"""
    user = AuthUser(**request_body.user.model_dump()) if request_body.user else None
    session.handle(AuthEvent(type=request_body.type, user=user, reason=request_body.reason))
    return session_response(session)
