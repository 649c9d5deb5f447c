from typing import Optional

from fastapi import Depends, Header, Request

from minifacebook.core.security import SessionTokens
from minifacebook.models.user import User
from minifacebook.services.auth import AuthService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_session_tokens(request: Request) -> SessionTokens:
    return request.app.state.auth_service.sessions


def get_current_account_id(
    authorization: Optional[str] = Header(None),
    sessions: SessionTokens = Depends(get_session_tokens),
) -> int:
    """Bearer 토큰 검증 후 계정 id 반환. 없거나/깨졌거나/만료면 401."""
    return sessions.validate(authorization)


def get_current_account_id_optional(
    authorization: Optional[str] = Header(None),
    sessions: SessionTokens = Depends(get_session_tokens),
) -> Optional[int]:
    """
    Authorization 헤더가 없으면 None (익명).
    헤더가 있는데 invalid/expired 면 401.
    """
    if authorization is None:
        return None
    return sessions.validate(authorization)


def get_current_user(
    account_id: int = Depends(get_current_account_id),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    return auth.current_account(account_id)
