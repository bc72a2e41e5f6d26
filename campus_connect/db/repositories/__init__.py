"""
Repository layer for database operations.

Provides async functions for CRUD operations on User, Event, and RSVP entities.
Event reads are cached in Redis; every write that changes what those reads
return invalidates the ``events:*`` keys.

RSVP mutations here never commit: ``RSVPService`` composes them with the
attendee counter update inside one transaction.
"""
from sqlalchemy import select, delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload
from campus_connect.db.models.user import User, RoleEnum
from campus_connect.db.models.event import Event, EventCategory
from campus_connect.db.models.rsvp import RSVP, RSVPStatusEnum
from campus_connect.schemas import UserCreate, EventCreate
from typing import Optional, List
from campus_connect.cache.cache_decorators import cached
from campus_connect.cache.redis_client import cache
from campus_connect.core.security import hash_password
import uuid


async def create_user(db: AsyncSession, user_in: UserCreate) -> User:
    """
    Create a new user with hashed password.

    Args:
        db: Database session
        user_in: User registration data

    Returns:
        Created User object
    """
    user = User(
        full_name=user_in.full_name.strip(),
        email=user_in.email.lower(),
        hashed_password=hash_password(user_in.password),
        role=user_in.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user

async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    q = select(User).where(User.email == email.lower())
    res = await db.execute(q)
    return res.scalars().first()

async def get_user(db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
    q = select(User).where(User.id == user_id)
    res = await db.execute(q)
    return res.scalars().first()

async def list_students(db: AsyncSession) -> List[User]:
    """All student-role users, the recipients of new-event notifications."""
    q = select(User).where(User.role == RoleEnum.student).order_by(User.created_at)
    res = await db.execute(q)
    return list(res.scalars().all())


def event_to_dict(ev: Event) -> dict:
    """Serialize an Event with its creator's display fields."""
    creator = ev.creator
    return {
        'id': str(ev.id),
        'title': ev.title,
        'description': ev.description,
        'detailed_description': ev.detailed_description,
        'date': ev.date.isoformat() if ev.date else None,
        'location': ev.location,
        'image_url': ev.image_url,
        'category': ev.category.value if ev.category else None,
        'tags': list(ev.tags or []),
        'attendee_count': ev.attendee_count or 0,
        'created_by': {
            'id': str(creator.id),
            'full_name': creator.full_name,
            'email': creator.email,
        },
        'created_at': ev.created_at.isoformat() if ev.created_at else None,
        'updated_at': ev.updated_at.isoformat() if ev.updated_at else None,
    }

async def invalidate_event_cache() -> None:
    await cache.delete_pattern("events:*")

async def create_event(db: AsyncSession, payload: EventCreate, creator_id: uuid.UUID) -> Event:
    """
    Persist a new event and invalidate the events cache.

    Args:
        db: Database session
        payload: Event creation data
        creator_id: UUID of the admin creating the event

    Returns:
        Created Event object with its creator loaded
    """
    ev = Event(
        **payload.model_dump(exclude={"created_by"}),
        created_by=creator_id,
        attendee_count=0,
    )
    db.add(ev)
    await db.commit()

    ev = await get_event_row(db, ev.id)
    await invalidate_event_cache()
    return ev

async def get_event_row(db: AsyncSession, event_id: uuid.UUID, for_update: bool = False) -> Optional[Event]:
    """Load the Event ORM row, bypassing stale identity-map state."""
    q = (
        select(Event)
        .options(joinedload(Event.creator))
        .where(Event.id == event_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        q = q.with_for_update(of=Event)
    res = await db.execute(q)
    return res.scalars().first()

@cached('events:list', expire=300)  # Cache for 5 minutes
async def list_events(db: AsyncSession, category: Optional[EventCategory] = None) -> List[dict]:
    """
    List events newest first, optionally restricted to one category.
    Returns a list of event dictionaries for caching compatibility.
    """
    q = (
        select(Event)
        .options(joinedload(Event.creator))
        .order_by(Event.created_at.desc(), Event.date.desc())
        .execution_options(populate_existing=True)
    )
    if category:
        q = q.where(Event.category == category)

    res = await db.execute(q)
    return [event_to_dict(ev) for ev in res.scalars().all()]

@cached('events:detail', expire=300)  # Cache for 5 minutes
async def get_event(db: AsyncSession, event_id: uuid.UUID) -> Optional[dict]:
    ev = await get_event_row(db, event_id)
    return event_to_dict(ev) if ev else None

async def get_attendee_count(db: AsyncSession, event_id: uuid.UUID) -> int:
    q = select(Event.attendee_count).where(Event.id == event_id)
    res = await db.execute(q)
    return res.scalar() or 0

async def adjust_attendee_count(db: AsyncSession, event_id: uuid.UUID, delta: int) -> int:
    """
    Atomically add ``delta`` to the event's attendee counter in SQL.

    Returns the counter value visible inside the current transaction.
    """
    await db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(attendee_count=Event.attendee_count + delta)
        .execution_options(synchronize_session=False)
    )
    return await get_attendee_count(db, event_id)

async def get_user_rsvp_for_event(db: AsyncSession, user_id: uuid.UUID, event_id: uuid.UUID) -> Optional[RSVP]:
    """
    Get a user's RSVP for a specific event.

    Returns:
        RSVP object if found, None otherwise
    """
    q = select(RSVP).where(
        RSVP.user_id == user_id,
        RSVP.event_id == event_id
    )
    res = await db.execute(q)
    return res.scalars().first()

async def insert_rsvp(
    db: AsyncSession,
    user_id: uuid.UUID,
    event_id: uuid.UUID,
    status: RSVPStatusEnum = RSVPStatusEnum.yes,
) -> RSVP:
    """
    Stage a new RSVP and flush it so the unique constraint is checked now.

    Raises:
        IntegrityError: If the (user, event) pair already has an RSVP
    """
    r = RSVP(user_id=user_id, event_id=event_id, status=status)
    db.add(r)
    await db.flush()
    return r

async def delete_rsvp(db: AsyncSession, user_id: uuid.UUID, event_id: uuid.UUID) -> bool:
    """Delete the pair's RSVP; True when a row was removed."""
    res = await db.execute(
        delete(RSVP)
        .where(RSVP.user_id == user_id, RSVP.event_id == event_id)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount > 0

async def list_rsvps_for_user(db: AsyncSession, user_id: uuid.UUID) -> List[RSVP]:
    """A user's RSVPs newest first, each with its Event loaded."""
    q = (
        select(RSVP)
        .options(joinedload(RSVP.event))
        .where(RSVP.user_id == user_id)
        .order_by(RSVP.created_at.desc())
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    return list(res.scalars().all())
