# minifacebook/services/mailer.py
import html
import smtplib
from email.message import EmailMessage

import structlog

from minifacebook.core.config import Settings
from minifacebook.core.errors import DependencyFailure

logger = structlog.get_logger()

SUBJECT = "Verify your MiniFacebook account"


def render_verification_html(name: str, link: str) -> str:
    return (
        f"<h2>Welcome to MiniFacebook, {html.escape(name)}</h2>"
        "<p>Click the link below to verify your account:</p>"
        f'<a href="{link}">Verify account</a>'
    )


class SmtpDispatcher:
    """인증 메일을 SMTP 로 발송. 실패는 DependencyFailure 로 올림."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
        sender: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.sender = sender

    def build_message(self, to: str, name: str, link: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = SUBJECT
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content(f"Verify your account: {link}")
        msg.add_alternative(render_verification_html(name, link), subtype="html")
        return msg

    def send_verification(self, to: str, name: str, link: str) -> None:
        try:
            # 헤더에 CR/LF 가 들어오면 ValueError
            msg = self.build_message(to, name, link)
        except ValueError as e:
            raise DependencyFailure(f"invalid mail header: {e}") from e

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DependencyFailure(f"mail delivery failed: {e}") from e


class LogDispatcher:
    """SMTP 설정이 없을 때(개발용) 링크를 로그로만 남김."""

    def send_verification(self, to: str, name: str, link: str) -> None:
        logger.info("verification_link", to=to, link=link)


def build_dispatcher(settings: Settings):
    if not settings.SMTP_HOST:
        logger.warning("smtp_not_configured", detail="verification links are logged instead of mailed")
        return LogDispatcher()
    return SmtpDispatcher(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_TLS,
        timeout=settings.SMTP_TIMEOUT,
        sender=settings.MAIL_FROM,
    )
