from sqlalchemy import Column, DateTime, ForeignKey, func, Enum, Index, UniqueConstraint, Uuid
import uuid
from sqlalchemy.orm import relationship
from campus_connect.db.session import Base
import enum

class RSVPStatusEnum(str, enum.Enum):
    yes = "yes"
    no = "no"
    maybe = "maybe"

class RSVP(Base):
    __tablename__ = "rsvps"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    status = Column(Enum(RSVPStatusEnum), default=RSVPStatusEnum.yes, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User")
    event = relationship("Event")

    # One RSVP per (user, event); the toggle relies on this constraint
    __table_args__ = (
        UniqueConstraint('user_id', 'event_id', name='uq_user_event_rsvp'),
        Index('idx_rsvp_user', 'user_id'),
        Index('idx_rsvp_event', 'event_id'),
    )
