"""
RSVP service: attendance toggling and the event attendee counter.

An RSVP row exists for (user, event) exactly when the user is attending, and
``Event.attendee_count`` equals the number of such rows. Every mutation below
changes the row and the counter in the same transaction, with the event row
locked, and the ``uq_user_event_rsvp`` constraint as the last line against
duplicate inserts.
"""
import enum
import uuid
from typing import List, NamedTuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.core.config import settings
from campus_connect.core.errors import Conflict, InternalError, NotFound, parse_identifier
from campus_connect.core.logging import logger
from campus_connect.db.models.rsvp import RSVP, RSVPStatusEnum
from campus_connect.db.repositories import (
    adjust_attendee_count,
    delete_rsvp,
    get_event_row,
    get_user,
    get_user_rsvp_for_event,
    insert_rsvp,
    invalidate_event_cache,
    list_rsvps_for_user,
)


class ToggleAction(str, enum.Enum):
    created = "created"
    removed = "removed"


class ToggleResult(NamedTuple):
    action: ToggleAction
    attending: bool
    attendee_count: int


class RSVPService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _ensure_exists(self, event_id: uuid.UUID, user_id: uuid.UUID, lock: bool = False) -> None:
        if not await get_event_row(self.session, event_id, for_update=lock):
            raise NotFound("Event not found")
        if not await get_user(self.session, user_id):
            raise NotFound("User not found")

    async def toggle_attendance(self, event_id: str, user_id: str) -> ToggleResult:
        """
        Flip a user's attendance for an event.

        Removes the RSVP and decrements the counter when one exists, otherwise
        creates one (status ``yes``) and increments the counter.

        Raises:
            InvalidArgument: Malformed event or user id
            NotFound: Event or user does not exist
            InternalError: Storage failure; nothing was changed
        """
        eid = parse_identifier(event_id, "Invalid event or user ID")
        uid = parse_identifier(user_id, "Invalid event or user ID")

        attempts = max(1, settings.RSVP_TOGGLE_MAX_ATTEMPTS)
        for attempt in range(1, attempts + 1):
            try:
                result = await self._toggle_once(eid, uid)
            except IntegrityError:
                # A concurrent toggle inserted the same pair first; replay
                # against the now-visible row.
                await self.session.rollback()
                logger.warning(f"RSVP toggle race for user {uid} on event {eid} (attempt {attempt}/{attempts})")
                continue
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error(f"Error toggling RSVP for user {uid} on event {eid}: {e}")
                raise InternalError("Failed to toggle RSVP")

            await invalidate_event_cache()
            logger.info(f"RSVP {result.action.value} for user {uid} on event {eid}; count={result.attendee_count}")
            return result

        raise Conflict("RSVP is being updated concurrently, please retry", status_code=409)

    async def _toggle_once(self, event_id: uuid.UUID, user_id: uuid.UUID) -> ToggleResult:
        await self._ensure_exists(event_id, user_id, lock=True)

        if await delete_rsvp(self.session, user_id, event_id):
            count = await adjust_attendee_count(self.session, event_id, -1)
            await self.session.commit()
            return ToggleResult(ToggleAction.removed, False, count)

        await insert_rsvp(self.session, user_id, event_id)
        count = await adjust_attendee_count(self.session, event_id, 1)
        await self.session.commit()
        return ToggleResult(ToggleAction.created, True, count)

    async def get_attendance_status(self, event_id: str, user_id: str) -> bool:
        eid = parse_identifier(event_id, "Invalid event or user ID")
        uid = parse_identifier(user_id, "Invalid event or user ID")
        return await get_user_rsvp_for_event(self.session, uid, eid) is not None

    async def list_attendance(self, user_id: str) -> List[RSVP]:
        uid = parse_identifier(user_id, "Invalid user ID")
        return await list_rsvps_for_user(self.session, uid)

    async def create_rsvp(self, user_id: str, event_id: str, status: RSVPStatusEnum = RSVPStatusEnum.yes) -> RSVP:
        """
        Non-toggling RSVP used by ``POST /rsvps``.

        Shares the toggle's insert-and-increment path so the counter stays
        in step; a repeat for the same pair is rejected.

        Raises:
            Conflict: The user already RSVPed to this event
        """
        eid = parse_identifier(event_id, "Invalid event or user ID")
        uid = parse_identifier(user_id, "Invalid event or user ID")
        await self._ensure_exists(eid, uid, lock=True)

        if await get_user_rsvp_for_event(self.session, uid, eid):
            raise Conflict("Already RSVPed")

        try:
            rsvp = await insert_rsvp(self.session, uid, eid, status)
            await adjust_attendee_count(self.session, eid, 1)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise Conflict("Already RSVPed")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating RSVP for user {uid} on event {eid}: {e}")
            raise InternalError("Failed to RSVP")

        await self.session.refresh(rsvp)
        await invalidate_event_cache()
        logger.info(f"RSVP {rsvp.id} created for user {uid} on event {eid}")
        return rsvp
