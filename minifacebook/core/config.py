# minifacebook/core/config.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./minifacebook.db"

    JWT_SECRET: str = "change-this-secret"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # 인증 메일 링크: {PUBLIC_BASE_URL}/verify?token=...
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    MAIL_FROM: str = "MiniFacebook <no-reply@minifacebook.local>"
    # 비어 있으면 메일 대신 로그로 링크를 남김
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_TLS: bool = True
    SMTP_TIMEOUT: float = 10.0

    PASSWORD_HASH_TIME_COST: int = 2
    PASSWORD_HASH_MEMORY_COST: int = 102400
    PASSWORD_HASH_PARALLELISM: int = 8

    # Azure는 안 쓰면 빈값
    AZURE_STORAGE_CONNECTION_STRING: str = ""
    AZURE_CONTAINER_NAME: str = ""
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
