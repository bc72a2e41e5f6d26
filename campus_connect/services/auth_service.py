"""Authentication service for user registration and login."""
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from campus_connect.schemas import UserCreate, LoginRequest
from campus_connect.db.repositories import create_user as db_create_user, get_user_by_email as db_get_user_by_email
from campus_connect.core.security import create_access_token, verify_password, validate_password
from campus_connect.core.errors import Conflict, InvalidArgument, InternalError
from campus_connect.core.logging import logger
from fastapi import HTTPException, status


class AuthService:
    """
    Service layer for authentication operations.

    Handles user registration and credential verification.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def register(self, payload: UserCreate):
        """
        Register a new user with password validation.

        Args:
            payload: Registration data containing full name, email, password and role

        Returns:
            Created user object

        Raises:
            InvalidArgument: If the password is weak
            Conflict: If the email already exists
        """
        try:
            validate_password(payload.password)
        except ValueError as e:
            raise InvalidArgument(str(e))

        existing = await db_get_user_by_email(self.session, payload.email)
        if existing:
            raise Conflict("User already exists")

        try:
            user = await db_create_user(self.session, payload)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.session.rollback()
            raise Conflict("User already exists")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to register {payload.email}: {e}")
            raise InternalError("Server error")

        logger.info(f"Registered {user.role.value} user {user.id}")
        return user

    async def login(self, form_data: LoginRequest):
        """
        Verify credentials and issue an access token.

        Returns:
            Dictionary with the user, access_token and token_type

        Raises:
            HTTPException: 401 with a generic message for any credential mismatch
        """
        user = await db_get_user_by_email(self.session, form_data.email)
        if not user or not verify_password(form_data.password, user.hashed_password):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

        token_data = {"sub": str(user.id), "role": user.role.value}
        return {
            "user": user,
            "access_token": create_access_token(token_data),
            "token_type": "bearer",
        }
