import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError
from passlib.hash import argon2

from minifacebook.core.config import Settings
from minifacebook.core.errors import Unauthorized


class PasswordHasher:
    def __init__(self, time_cost: int = 2, memory_cost: int = 102400, parallelism: int = 8):
        self._argon2 = argon2.using(time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.PASSWORD_HASH_TIME_COST,
            memory_cost=settings.PASSWORD_HASH_MEMORY_COST,
            parallelism=settings.PASSWORD_HASH_PARALLELISM,
        )

    def hash(self, plain: str) -> str:
        return self._argon2.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        # passlib 비교는 상수 시간. 깨진 해시는 불일치로 취급
        try:
            return argon2.verify(plain, hashed)
        except ValueError:
            return False


def issue_verify_token() -> str:
    """이메일 인증용 1회성 토큰 (uuid4, 122bit 난수)."""
    return str(uuid.uuid4())


class SessionTokens:
    """로그인 세션 JWT 발급/검증. 서버에 세션을 저장하지 않음."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionTokens":
        return cls(settings.JWT_SECRET, settings.JWT_ALG, settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def issue(self, account_id: int) -> str:
        now = datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self.expire_minutes)
        payload = {"sub": str(account_id), "iat": now, "exp": exp}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm], options={"verify_aud": False})
        except ExpiredSignatureError:
            raise Unauthorized("Session expired, please log in again", code="token_expired")
        except JWTError:
            raise Unauthorized("Invalid session token", code="invalid_token")

    def validate(self, authorization: Optional[str]) -> int:
        """'Bearer <token>' 헤더를 검증하고 계정 id 를 돌려준다."""
        if not authorization:
            raise Unauthorized("Missing bearer token", code="missing_bearer_token")

        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
            raise Unauthorized("Malformed authorization header", code="invalid_token")

        payload = self.decode(parts[1])
        sub = payload.get("sub")
        if not sub:
            raise Unauthorized("Invalid session token", code="invalid_token")
        try:
            return int(sub)
        except (TypeError, ValueError):
            raise Unauthorized("Invalid session token", code="invalid_token")
