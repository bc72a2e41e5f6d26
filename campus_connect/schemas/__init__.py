from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from uuid import UUID
from datetime import datetime
from campus_connect.db.models import EventCategory, RoleEnum, RSVPStatusEnum

class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class UserCreate(CamelModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str
    role: RoleEnum = RoleEnum.student

class UserOut(CamelModel):
    id: UUID
    full_name: str
    email: EmailStr
    role: RoleEnum
    created_at: Optional[datetime] = None

class LoginRequest(CamelModel):
    email: EmailStr
    password: str

class SessionOut(CamelModel):
    """Login response: the user plus a bearer token."""
    user: UserOut
    access_token: str
    token_type: str = "bearer"

class CreatorOut(CamelModel):
    id: UUID
    full_name: str
    email: EmailStr

class EventCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    detailed_description: Optional[str] = None
    date: datetime
    location: Optional[str] = None
    image_url: Optional[str] = None
    created_by: str
    category: EventCategory = EventCategory.others
    tags: List[str] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return [tag.strip() for tag in v if tag and tag.strip()]

class EventOut(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    detailed_description: Optional[str] = None
    date: datetime
    location: Optional[str] = None
    image_url: Optional[str] = None
    category: EventCategory
    tags: List[str] = []
    attendee_count: int
    created_by: CreatorOut
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ToggleRSVPRequest(CamelModel):
    user_id: str

class ToggleRSVPOut(CamelModel):
    message: str
    attending: bool
    attendee_count: int

class AttendanceStatusOut(CamelModel):
    attending: bool

class RSVPCreate(CamelModel):
    user_id: str
    event_id: str
    status: RSVPStatusEnum = RSVPStatusEnum.yes

class RSVPOut(CamelModel):
    id: UUID
    user_id: UUID
    event_id: UUID
    status: RSVPStatusEnum
    created_at: Optional[datetime] = None

class EventSummary(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    date: datetime
    location: Optional[str] = None
    image_url: Optional[str] = None
    category: EventCategory
    tags: List[str] = []
    attendee_count: int

class RSVPWithEventOut(RSVPOut):
    event: EventSummary

class EmailHealthOut(CamelModel):
    configured: bool
    message: str
