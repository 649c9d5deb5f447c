# minifacebook/core/errors.py
from typing import Optional

from fastapi import status


class AppError(Exception):
    """도메인 에러 베이스. main.py 의 핸들러가 {success:false, error, message} 로 변환."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"
    message = "Bad request"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    message = "Please fill in all fields"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "email_already_registered"
    message = "Email already registered"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    message = "Not found"


class NotVerified(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "email_not_verified"
    message = "Verify your email first"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "invalid_credentials"
    message = "Incorrect password"


class InvalidToken(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_token"
    message = "Invalid or expired token"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "invalid_token"
    message = "Authentication required"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    message = "Not allowed"


class DependencyFailure(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "dependency_failure"
    message = "Service temporarily unavailable"


class ImageStorageError(DependencyFailure):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "image_storage_unavailable"
    message = "Image upload failed"
