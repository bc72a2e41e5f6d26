"""
New-event email templates.

Plain-text and HTML bodies are rendered from the same fields; every value
interpolated into HTML is escaped.
"""
from datetime import datetime
from html import escape
from typing import List, NamedTuple, Optional

from campus_connect.core.config import settings
from campus_connect.db.models.event import Event

DEFAULT_HOST_NAME = "Campus Admin"
DEFAULT_LOCATION = "Location TBA"


class EventEmail(NamedTuple):
    subject: str
    text: str
    html: str


def format_date(value: datetime) -> str:
    """``Monday, January 5, 2026``"""
    return f"{value:%A, %B} {value.day}, {value.year}"


def format_time(value: datetime) -> str:
    """``3:30 PM``"""
    hour = value.hour % 12 or 12
    return f"{hour}:{value:%M} {'AM' if value.hour < 12 else 'PM'}"


def format_tags(tags: Optional[List[str]]) -> str:
    return ", ".join(f"#{tag}" for tag in (tags or []))


def event_link(event: Event) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/event/{event.id}"


def host_name(event: Event) -> str:
    creator = event.creator
    return creator.full_name if creator is not None and creator.full_name else DEFAULT_HOST_NAME


def _category(event: Event) -> str:
    return event.category.value if event.category else "Others"


def render_text(event: Event) -> str:
    lines = [
        f"New Event Alert: {event.title}",
        "",
        f"Category: {_category(event)}",
        f"Date: {format_date(event.date)}",
        f"Time: {format_time(event.date)}",
        f"Location: {event.location or DEFAULT_LOCATION}",
        f"Hosted by: {host_name(event)}",
    ]
    if event.tags:
        lines.append(f"Tags: {format_tags(event.tags)}")
    about = event.detailed_description or event.description
    if about:
        lines += ["", about]
    lines += ["", f"View full event details and RSVP at: {event_link(event)}"]
    return "\n".join(lines)


def render_html(event: Event) -> str:
    rows = [
        ("Date", format_date(event.date)),
        ("Time", format_time(event.date)),
        ("Location", event.location or DEFAULT_LOCATION),
        ("Hosted by", host_name(event)),
    ]
    if event.tags:
        rows.append(("Tags", format_tags(event.tags)))
    detail_rows = "\n".join(
        f'<tr><td style="font-weight:600;color:#2563eb;padding:6px 12px 6px 0">{label}:</td>'
        f'<td style="color:#4b5563">{escape(value)}</td></tr>'
        for label, value in rows
    )

    about = event.detailed_description or event.description
    about_block = ""
    if about:
        about_block = (
            '<div style="margin:20px 0;padding:20px;background:#f0f9ff;border-left:4px solid #2563eb">'
            f"<h3 style=\"margin-top:0;color:#1e40af\">About This Event</h3><p>{escape(about)}</p></div>"
        )

    title = escape(event.title)
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>New Event: {title}</title></head>
<body style="font-family:Arial,sans-serif;color:#333;max-width:600px;margin:0 auto;padding:20px">
  <div style="text-align:center;border-bottom:3px solid #2563eb;padding-bottom:20px">
    <h1 style="color:#2563eb">New Event Alert!</h1>
    <span style="padding:6px 12px;background:#dbeafe;color:#1e40af;border-radius:20px">{escape(_category(event))}</span>
  </div>
  <h2>{title}</h2>
  <table>{detail_rows}</table>
  {about_block}
  <p style="text-align:center">
    <a href="{escape(event_link(event), quote=True)}" style="padding:14px 32px;background:#2563eb;color:#fff;text-decoration:none;border-radius:8px">View Event Details &amp; RSVP</a>
  </p>
  <p style="text-align:center;font-size:12px;color:#9ca3af">
    You're receiving this email because you're registered as a student in Campus Connect.
  </p>
</body>
</html>"""


def render_event_email(event: Event) -> EventEmail:
    return EventEmail(
        subject=f"New Event: {event.title}",
        text=render_text(event),
        html=render_html(event),
    )
