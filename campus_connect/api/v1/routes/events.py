from fastapi import APIRouter, Depends, Query, Response, status
from campus_connect.schemas import (
    AttendanceStatusOut,
    EventCategory,
    EventCreate,
    EventOut,
    ToggleRSVPOut,
    ToggleRSVPRequest,
)
from campus_connect.db.session import get_session
from campus_connect.services.event_service import EventService
from campus_connect.services.rsvp_service import RSVPService, ToggleAction
from campus_connect.api.v1.routes.rsvps import get_rsvp_service
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

router = APIRouter(prefix="/events", tags=["events"])

def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)

@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    payload: EventCreate,
    event_service: EventService = Depends(get_event_service)
):
    """
    Create an event on behalf of the admin named in ``createdBy``.

    Students are notified by email in the background; the response does not
    wait for delivery.
    """
    return await event_service.create_event(payload)

@router.get("", response_model=List[EventOut])
async def get_events(
    category: Optional[EventCategory] = Query(None, description="Filter by event category"),
    event_service: EventService = Depends(get_event_service)
):
    """List all events, newest first, optionally restricted to one category."""
    return await event_service.list_events(category)

@router.get("/{event_id}", response_model=EventOut)
async def get_event_detail(
    event_id: str,
    event_service: EventService = Depends(get_event_service)
):
    return await event_service.get_event(event_id)

@router.post("/{event_id}/rsvp", response_model=ToggleRSVPOut)
async def toggle_rsvp(
    event_id: str,
    payload: ToggleRSVPRequest,
    response: Response,
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """
    Toggle the user's attendance.

    201 when an RSVP was created, 200 when it was removed.
    """
    result = await rsvp_service.toggle_attendance(event_id, payload.user_id)
    created = result.action == ToggleAction.created
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return ToggleRSVPOut(
        message="RSVP created" if created else "RSVP removed",
        attending=result.attending,
        attendee_count=result.attendee_count,
    )

@router.get("/{event_id}/rsvp/{user_id}", response_model=AttendanceStatusOut)
async def get_rsvp_status(
    event_id: str,
    user_id: str,
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    attending = await rsvp_service.get_attendance_status(event_id, user_id)
    return AttendanceStatusOut(attending=attending)
