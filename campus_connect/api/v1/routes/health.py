from fastapi import APIRouter
from typing import Dict
from campus_connect.notifications.mailer import verify_email_configuration
from campus_connect.schemas import EmailHealthOut

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=Dict[str, str])
async def health_check():
    """
    Basic health check endpoint.

    Returns:
        Dict with status indicating the service is healthy
    """
    return {"status": "healthy"}


@router.get("/email", response_model=EmailHealthOut)
async def email_health_check():
    """Report whether the SMTP relay is configured and accepts our credentials."""
    return await verify_email_configuration()
