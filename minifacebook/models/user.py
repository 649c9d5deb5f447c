from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from minifacebook.core.db import Base

class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    name = Column(String(100), nullable=False)
    # 대소문자 그대로 저장 (정규화 없음)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)

    # 미인증 동안만 값이 있고, 인증되면 NULL
    verify_token = Column(String(64), nullable=True, index=True)
    verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
