import asyncio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from campus_connect.schemas import EventCreate
from campus_connect.db.models.user import RoleEnum
from campus_connect.db.models.event import EventCategory
from campus_connect.db.repositories import (
    create_event as db_create_event,
    event_to_dict,
    get_event as db_get_event,
    get_user as db_get_user,
    list_events as db_list_events,
)
from campus_connect.core.errors import Forbidden, InternalError, NotFound, parse_identifier
from campus_connect.core.config import settings
from campus_connect.core.logging import logger
from campus_connect.events import publisher
from typing import List, Optional

class EventService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_event(self, payload: EventCreate) -> dict:
        """
        Persist an event and hand notification off to the worker.

        The event is committed before ``event.created`` is published; a
        publishing failure is logged and does not affect the response.
        """
        creator_id = parse_identifier(payload.created_by, "Invalid createdBy user ID.")
        creator = await db_get_user(self.session, creator_id)
        if not creator:
            raise NotFound("User not found for createdBy field.")
        if creator.role != RoleEnum.admin:
            raise Forbidden("Only administrators can create events.")

        try:
            event = await db_create_event(self.session, payload, creator_id)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating event: {e}")
            raise InternalError("Failed to create event")

        logger.info(f"Event {event.id} created by {creator_id}")
        await self._publish_created(event.id, creator_id)
        return event_to_dict(event)

    async def _publish_created(self, event_id, creator_id) -> None:
        try:
            await asyncio.wait_for(
                publisher.publish_event(
                    "event.created",
                    {"type": "event.created", "event_id": str(event_id), "created_by": str(creator_id)},
                ),
                timeout=settings.PUBLISH_TIMEOUT,
            )
        except Exception as e:
            logger.error(f"Failed to enqueue notifications for event {event_id}: {e}")

    async def get_event(self, event_id: str) -> dict:
        ev = await db_get_event(self.session, parse_identifier(event_id, "Invalid event ID"))
        if not ev:
            raise NotFound("Event not found")
        return ev

    async def list_events(self, category: Optional[EventCategory] = None) -> List[dict]:
        return await db_list_events(self.session, category=category)
