"""Database models package."""
from campus_connect.db.models.user import User, RoleEnum
from campus_connect.db.models.event import Event, EventCategory
from campus_connect.db.models.rsvp import RSVP, RSVPStatusEnum

__all__ = ["User", "RoleEnum", "Event", "EventCategory", "RSVP", "RSVPStatusEnum"]
