from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from campus_connect.db.session import get_session
from sqlalchemy.ext.asyncio import AsyncSession
from campus_connect.db.models.user import User
from campus_connect.db.repositories import get_user
from campus_connect.core.errors import parse_identifier
from campus_connect.core.security import decode_token

# Shows a simple "Authorize" button in Swagger UI where the JWT can be pasted
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the user behind a bearer access token.

    Raises:
        HTTPException: 401 if the token is invalid, of the wrong type, or
            names a user that no longer exists
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_token(credentials.credentials)
    except ValueError:
        raise credentials_exception

    if payload.get("type") != "access":
        raise credentials_exception

    user_id: Optional[str] = payload.get("sub")
    try:
        user = await get_user(session, parse_identifier(user_id))
    except HTTPException:
        raise credentials_exception
    if not user:
        raise credentials_exception
    return user
