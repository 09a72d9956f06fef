"""Pydantic models for API request/response.

JSON uses camelCase field names; Python code uses snake_case.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from domain.model.user import (
    RoleStatusChange,
    UserProfileUpdate,
    UserRegistration,
    UserRole,
    UserStatus,
    UserView,
)

NAME_PATTERN = r"^[a-zA-Z\s'-]+$"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class RegisterRequest(CamelModel):
    """Request model for user registration."""
    first_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    display_name: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = Field(None, max_length=32)
    password: str
    date_of_birth: Optional[date] = None

    def to_domain(self) -> UserRegistration:
        return UserRegistration(
            first_name=self.first_name,
            last_name=self.last_name,
            display_name=self.display_name,
            email=self.email,
            phone_number=self.phone_number,
            password=self.password,
            date_of_birth=self.date_of_birth,
        )


class UpdateUserRequest(CamelModel):
    """Request model for profile update."""
    first_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    display_name: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=32)
    date_of_birth: Optional[date] = None

    def to_domain(self) -> UserProfileUpdate:
        return UserProfileUpdate(
            first_name=self.first_name,
            last_name=self.last_name,
            display_name=self.display_name,
            phone_number=self.phone_number,
            date_of_birth=self.date_of_birth,
        )


class RoleStatusRequest(CamelModel):
    """Request model for an administrative role/status change."""
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None

    def to_domain(self) -> RoleStatusChange:
        return RoleStatusChange(role=self.role, status=self.status)


class UserResponse(CamelModel):
    """Response model for user info (never includes the password hash)."""
    id: str = Field(..., description="User ID")
    full_name: str
    display_name: str
    email: str
    phone_number: Optional[str] = None
    role: UserRole
    status: UserStatus
    created_at: datetime

    @classmethod
    def from_view(cls, view: UserView) -> "UserResponse":
        return cls(
            id=view.id,
            full_name=view.full_name,
            display_name=view.display_name,
            email=view.email,
            phone_number=view.phone_number,
            role=view.role,
            status=view.status,
            created_at=view.created_at,
        )
