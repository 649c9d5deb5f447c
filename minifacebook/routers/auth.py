from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import HTMLResponse

from minifacebook.core.auth import get_auth_service
from minifacebook.core.errors import InvalidToken
from minifacebook.schemas.auth import RegisterIn, RegisterOut, LoginIn, LoginOut
from minifacebook.services.auth import AuthService

router = APIRouter(tags=["auth"])


# 해시/메일 발송이 느리므로 sync def → FastAPI 스레드풀에서 실행
@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, response: Response, auth: AuthService = Depends(get_auth_service)):
    result = auth.register(name=payload.name, email=payload.email, password=payload.password)

    if not result.created:
        response.status_code = status.HTTP_200_OK

    if result.email_sent:
        message = "We sent you an email to verify your account"
    else:
        message = "Account pending verification, but the email could not be sent. Register again to resend it"

    return RegisterOut(message=message, email_sent=result.email_sent)


@router.get("/verify", response_class=HTMLResponse)
def verify(token: Optional[str] = Query(None), auth: AuthService = Depends(get_auth_service)):
    try:
        auth.verify(token)
    except InvalidToken as e:
        return HTMLResponse(f"<p>{e.message}</p>", status_code=e.status_code)
    return HTMLResponse("<p>Account verified, you can now log in</p>")


@router.post("/login", response_model=LoginOut, status_code=status.HTTP_200_OK)
def login(payload: LoginIn, auth: AuthService = Depends(get_auth_service)):
    token = auth.login(email=payload.email, password=payload.password)
    return LoginOut(token=token)
