# minifacebook/services/accounts.py
from typing import Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from minifacebook.core.errors import Conflict, DependencyFailure
from minifacebook.models.user import User

logger = structlog.get_logger()


class CredentialStore:
    """users 테이블 접근. 연산마다 짧은 세션 하나, 쿼리 한 번."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def find_by_email(self, email: str) -> Optional[User]:
        try:
            with self._session_factory() as db:
                return db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("credential_store_error", op="find_by_email", error=str(e))
            raise DependencyFailure() from e

    def get(self, account_id: int) -> Optional[User]:
        try:
            with self._session_factory() as db:
                return db.get(User, account_id)
        except SQLAlchemyError as e:
            logger.error("credential_store_error", op="get", error=str(e))
            raise DependencyFailure() from e

    def insert(
        self,
        email: str,
        name: str,
        password_hash: str,
        verify_token: Optional[str],
        verified: bool = False,
    ) -> User:
        u = User(
            email=email,
            name=name,
            password=password_hash,
            verify_token=verify_token,
            verified=verified,
        )
        try:
            with self._session_factory() as db:
                db.add(u)
                db.commit()
                db.refresh(u)
                return u
        except IntegrityError as e:
            # UNIQUE(email) 위반: 동시 가입에서 진 쪽도 여기로 옴
            raise Conflict() from e
        except SQLAlchemyError as e:
            logger.error("credential_store_error", op="insert", error=str(e))
            raise DependencyFailure() from e

    def mark_verified(self, token: str) -> bool:
        """토큰이 맞는 행 하나를 원자적으로 인증 처리. 읽고-쓰기 하지 않음."""
        if not token:
            return False
        stmt = (
            update(User)
            .where(User.verify_token == token, User.verified.is_(False))
            .values(verified=True, verify_token=None)
        )
        try:
            with self._session_factory() as db:
                result = db.execute(stmt)
                db.commit()
                return result.rowcount == 1
        except SQLAlchemyError as e:
            logger.error("credential_store_error", op="mark_verified", error=str(e))
            raise DependencyFailure() from e
