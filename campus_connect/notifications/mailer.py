"""
SMTP transport for outgoing mail, built on aiosmtplib.
"""
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid
from typing import Optional, Dict, Any

import aiosmtplib

from campus_connect.core.config import settings
from campus_connect.core.logging import logger


def _tls_options(port: int) -> Dict[str, bool]:
    # 465 is implicit TLS, 587 upgrades with STARTTLS
    return {"use_tls": port == 465, "start_tls": port == 587}


def build_message(to_email: str, subject: str, body: str, html_body: Optional[str] = None) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.EMAIL_FROM_NAME, settings.EMAIL_USER or ""))
    msg["To"] = to_email
    msg["Date"] = formatdate(localtime=True)
    msg["Message-ID"] = make_msgid()
    msg.attach(MIMEText(body, "plain", "utf-8"))
    if html_body:
        msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


async def send_email(to_email: str, subject: str, body: str, html_body: Optional[str] = None) -> None:
    """
    Deliver one message through the configured relay.

    Raises:
        aiosmtplib.SMTPException: On any SMTP-level failure
        OSError: When the relay is unreachable
    """
    msg = build_message(to_email, subject, body, html_body)
    await aiosmtplib.send(
        msg,
        hostname=settings.EMAIL_HOST,
        port=settings.EMAIL_PORT,
        username=settings.EMAIL_USER,
        password=settings.EMAIL_PASSWORD,
        timeout=settings.SMTP_TIMEOUT,
        **_tls_options(settings.EMAIL_PORT),
    )


async def verify_email_configuration() -> Dict[str, Any]:
    """
    Check that credentials are set and the relay accepts them.

    Returns:
        ``{"configured": bool, "message": str}``
    """
    if not settings.email_configured:
        return {"configured": False, "message": "Email credentials not set"}

    smtp = aiosmtplib.SMTP(
        hostname=settings.EMAIL_HOST,
        port=settings.EMAIL_PORT,
        timeout=settings.SMTP_TIMEOUT,
        **_tls_options(settings.EMAIL_PORT),
    )
    try:
        await smtp.connect()
        await smtp.login(settings.EMAIL_USER, settings.EMAIL_PASSWORD)
        await smtp.quit()
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.warning(f"Email relay check failed: {e}")
        return {"configured": False, "message": str(e)}
    return {"configured": True, "message": "Email service is ready"}
