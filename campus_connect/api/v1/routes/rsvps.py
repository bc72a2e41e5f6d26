from fastapi import APIRouter, Depends, status
from campus_connect.schemas import RSVPCreate, RSVPOut, RSVPWithEventOut
from campus_connect.db.session import get_session
from campus_connect.services.rsvp_service import RSVPService
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

router = APIRouter(prefix="/rsvps", tags=["rsvps"])

def get_rsvp_service(session: AsyncSession = Depends(get_session)) -> RSVPService:
    return RSVPService(session)

@router.post("", response_model=RSVPOut, status_code=status.HTTP_201_CREATED)
async def create_rsvp_endpoint(
    payload: RSVPCreate,
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """Direct, non-toggling RSVP. A second call for the same pair fails with 400."""
    return await rsvp_service.create_rsvp(payload.user_id, payload.event_id, payload.status)

@router.get("/{user_id}", response_model=List[RSVPWithEventOut])
async def list_user_rsvps(
    user_id: str,
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """A user's RSVPs, newest first, each with the event's display data."""
    return await rsvp_service.list_attendance(user_id)
