"""Login route."""
from fastapi import APIRouter, Depends, Request
from campus_connect.schemas import LoginRequest, SessionOut
from campus_connect.services.auth_service import AuthService
from campus_connect.api.v1.routes.users import get_auth_service
from campus_connect.core.rate_limit import limiter

router = APIRouter(prefix="/sessions", tags=["auth"])

@router.post("", response_model=SessionOut)
@limiter.limit("5/minute")
async def login(
    request: Request,
    form_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Verify credentials and return the user with an access token.

    Rate limit: 5 requests per minute. Unknown email and wrong password
    produce the same 401 response.
    """
    return await auth_service.login(form_data)
