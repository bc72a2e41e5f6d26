"""
New-event notification fan-out.

Runs in the notification worker after the event has been committed, never
inside the request that created it. Deliveries run concurrently and are
joined with ``asyncio.gather``; a failing recipient is recorded and the rest
of the batch carries on.
"""
import asyncio
import enum
from typing import Awaitable, Callable, List, Optional, Sequence

import aiosmtplib
from pydantic import BaseModel

from campus_connect.core.config import settings
from campus_connect.core.logging import logger
from campus_connect.db.models.event import Event
from campus_connect.db.models.user import User
from campus_connect.notifications.mailer import send_email
from campus_connect.notifications.templates import render_event_email

Sender = Callable[[str, str, str, Optional[str]], Awaitable[None]]


class NotificationStatus(str, enum.Enum):
    not_configured = "not_configured"
    nothing_to_send = "nothing_to_send"
    completed = "completed"


class DeliveryResult(BaseModel):
    email: str
    success: bool
    error: Optional[str] = None


class NotificationReport(BaseModel):
    """Aggregate outcome of one fan-out, for logs only."""
    status: NotificationStatus
    sent: int = 0
    failed: int = 0
    total: int = 0
    failures: List[DeliveryResult] = []
    transport_error: Optional[str] = None


async def notify_new_event(
    event: Event,
    recipients: Sequence[User],
    sender: Optional[Sender] = None,
) -> NotificationReport:
    """
    Email every recipient about a newly created event.

    Never raises for delivery problems: missing credentials, an empty
    recipient list, per-recipient failures and relay authentication errors
    all end up in the returned report.

    Args:
        event: The committed Event, with ``creator`` loaded
        recipients: Users to notify (normally every student)
        sender: Delivery coroutine, defaults to SMTP ``send_email``

    Returns:
        NotificationReport with sent/failed/total counts
    """
    if not settings.email_configured:
        logger.warning(f"Email credentials not configured. Skipping notifications for event {event.id}")
        return NotificationReport(status=NotificationStatus.not_configured)

    if not recipients:
        logger.info(f"No users to notify about event {event.id}")
        return NotificationReport(status=NotificationStatus.nothing_to_send)

    send = sender or send_email
    message = render_event_email(event)
    semaphore = asyncio.Semaphore(max(1, settings.SMTP_MAX_CONCURRENCY))

    async def deliver(recipient: User) -> None:
        async with semaphore:
            await asyncio.wait_for(
                send(recipient.email, message.subject, message.text, message.html),
                timeout=settings.SMTP_TIMEOUT,
            )

    outcomes = await asyncio.gather(*(deliver(r) for r in recipients), return_exceptions=True)

    sent = 0
    failures: List[DeliveryResult] = []
    transport_error = None
    for recipient, outcome in zip(recipients, outcomes):
        if isinstance(outcome, BaseException):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            error = str(outcome) or type(outcome).__name__
            logger.error(f"Failed to send email to {recipient.email}: {error}")
            failures.append(DeliveryResult(email=recipient.email, success=False, error=error))
            if transport_error is None and isinstance(outcome, aiosmtplib.SMTPAuthenticationError):
                transport_error = f"SMTP authentication failed: {error}"
        else:
            logger.debug(f"Email sent to {recipient.email}")
            sent += 1

    if transport_error:
        logger.error(transport_error)

    report = NotificationReport(
        status=NotificationStatus.completed,
        sent=sent,
        failed=len(failures),
        total=len(recipients),
        failures=failures,
        transport_error=transport_error,
    )
    logger.info(
        f"Email notification summary for event {event.id}: "
        f"{report.sent} sent, {report.failed} failed out of {report.total} total"
    )
    return report
