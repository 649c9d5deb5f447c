from pydantic import ConfigDict, Field
from .base import BaseSchema


class RegisterIn(BaseSchema):
    # 비밀번호/이메일은 받은 그대로 저장 → 공백 제거 안 함 (빈 값 검사는 AuthService)
    model_config = ConfigDict(str_strip_whitespace=False)

    name: str = Field(..., min_length=1, max_length=100)
    # 저장된 그대로 비교하므로 EmailStr 정규화는 쓰지 않음
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class RegisterOut(BaseSchema):
    success: bool = True
    message: str
    email_sent: bool


class LoginIn(BaseSchema):
    model_config = ConfigDict(str_strip_whitespace=False)

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginOut(BaseSchema):
    success: bool = True
    message: str = "Login successful"
    token: str
