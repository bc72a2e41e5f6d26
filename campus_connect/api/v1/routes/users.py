"""User registration and profile routes."""
from fastapi import APIRouter, Depends, Request, status
from campus_connect.schemas import UserCreate, UserOut
from campus_connect.services.auth_service import AuthService
from campus_connect.db.session import get_session
from campus_connect.db.models.user import User
from campus_connect.auth import get_current_user
from campus_connect.core.rate_limit import limiter
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/users", tags=["users"])

def get_auth_service(session: AsyncSession = Depends(get_session)) -> AuthService:
    return AuthService(session)

@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
async def register(
    request: Request,
    payload: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user account.

    Rate limit: 3 requests per minute. The password hash is never returned.
    """
    return await auth_service.register(payload)


@router.get("/me", response_model=UserOut)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get the user identified by the bearer token."""
    return current_user
