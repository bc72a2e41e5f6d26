from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func, Enum, Index, JSON, Uuid
import uuid
from sqlalchemy.orm import relationship
from campus_connect.db.session import Base
import enum

class EventCategory(str, enum.Enum):
    """Fixed set of event categories."""
    tech = "Tech"
    cultural = "Cultural"
    sports = "Sports"
    academic = "Academic"
    social = "Social"
    others = "Others"

class Event(Base):
    __tablename__ = "events"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)
    detailed_description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=True)
    image_url = Column(String(1024), nullable=True)
    # values_callable stores "Tech" rather than the member name "tech"
    category = Column(
        Enum(EventCategory, values_callable=lambda e: [m.value for m in e]),
        default=EventCategory.others,
        nullable=False,
    )
    tags = Column(JSON, nullable=False, default=list)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    # Denormalized count of RSVP rows; only RSVPService writes it
    attendee_count = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship("User", lazy="joined")

    # Indexes for frequently queried fields
    __table_args__ = (
        Index('idx_event_date', 'date'),
        Index('idx_event_organizer', 'created_by'),
        Index('idx_event_created_at', 'created_at'),
        Index('idx_event_category', 'category'),
    )
