# minifacebook/services/auth.py
"""
가입 → 이메일 인증 → 로그인 흐름.

계정 상태는 Unverified / Verified 두 가지.
- 신규 가입: Unverified 로 저장 후 인증 메일 발송
- 미인증 상태에서 재가입: 기존 토큰으로 메일만 다시 보냄 (행/토큰 그대로)
- 인증 완료된 이메일로 재가입: Conflict
- 인증: 토큰이 맞으면 Verified, 토큰은 NULL
- 로그인: Verified 계정만, 비밀번호 확인 후 세션 JWT 발급
"""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import structlog

from minifacebook.core.errors import (
    Conflict,
    DependencyFailure,
    InvalidCredentials,
    InvalidToken,
    NotFound,
    NotVerified,
    Unauthorized,
    ValidationError,
)
from minifacebook.core.security import PasswordHasher, SessionTokens, issue_verify_token
from minifacebook.models.user import User
from minifacebook.services.accounts import CredentialStore

logger = structlog.get_logger()


@dataclass
class RegisterResult:
    account_id: int
    created: bool
    email_sent: bool


def _require(*values: Optional[str]) -> None:
    for v in values:
        if v is None or not str(v).strip():
            raise ValidationError()


def _check_email(email: str) -> None:
    # 정규화는 하지 않고, 메일 헤더에 넣을 수 없는 값만 거절
    if "@" not in email or any(ord(c) < 32 or ord(c) == 127 for c in email):
        raise ValidationError("Invalid email address", code="invalid_email")


class AuthService:
    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        sessions: SessionTokens,
        dispatcher,
        base_url: str,
    ):
        self.store = store
        self.hasher = hasher
        self.sessions = sessions
        self.dispatcher = dispatcher
        self.base_url = base_url.rstrip("/")

    def verification_link(self, token: str) -> str:
        return f"{self.base_url}/verify?{urlencode({'token': token})}"

    def _send_verification(self, account: User) -> bool:
        link = self.verification_link(account.verify_token)
        try:
            self.dispatcher.send_verification(account.email, account.name, link)
        except DependencyFailure as e:
            # 계정은 이미 커밋됨. 재가입 요청으로 다시 보낼 수 있으니 경고만
            logger.warning("verification_email_failed", account_id=account.id, error=e.message)
            return False
        return True

    def register(self, name: str, email: str, password: str) -> RegisterResult:
        _require(name, email, password)
        _check_email(email)

        existing = self.store.find_by_email(email)
        if existing is not None:
            if existing.verified:
                raise Conflict()
            sent = self._send_verification(existing)
            logger.info("verification_resent", account_id=existing.id, email_sent=sent)
            return RegisterResult(account_id=existing.id, created=False, email_sent=sent)

        account = self.store.insert(
            email=email,
            name=name,
            password_hash=self.hasher.hash(password),
            verify_token=issue_verify_token(),
        )
        logger.info("account_registered", account_id=account.id)

        sent = self._send_verification(account)
        return RegisterResult(account_id=account.id, created=True, email_sent=sent)

    def verify(self, token: Optional[str]) -> None:
        if not token or not self.store.mark_verified(token):
            logger.info("verification_rejected")
            raise InvalidToken()
        logger.info("account_verified")

    def login(self, email: str, password: str) -> str:
        _require(email, password)

        account = self.store.find_by_email(email)
        if account is None:
            logger.info("login_rejected", reason="not_found")
            raise NotFound("User does not exist", code="user_not_found")
        if not account.verified:
            logger.info("login_rejected", reason="not_verified", account_id=account.id)
            raise NotVerified()
        if not self.hasher.verify(password, account.password):
            logger.info("login_rejected", reason="invalid_credentials", account_id=account.id)
            raise InvalidCredentials()

        logger.info("login_succeeded", account_id=account.id)
        return self.sessions.issue(account.id)

    def current_account(self, account_id: int) -> User:
        account = self.store.get(account_id)
        if account is None:
            raise Unauthorized("Account no longer exists", code="invalid_token")
        return account
