# domain/model/user.py

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Protocol


class UserRole(str, Enum):
    """Roles a user account can hold."""
    USER = 'User'
    ADMIN = 'Admin'


class UserStatus(str, Enum):
    """Lifecycle status of a user account."""
    ACTIVE = 'Active'
    INACTIVE = 'Inactive'
    SUSPENDED = 'Suspended'


# ── Requests ─────────────────────────────────────────────


class UserProfile(Protocol):
    """Profile fields shared by registration and update requests."""
    first_name: str
    last_name: str
    display_name: str | None
    phone_number: str | None
    date_of_birth: date | None


@dataclass(frozen=True)
class UserRegistration:
    """Input for creating a new account."""
    first_name: str
    last_name: str
    email: str
    password: str
    display_name: str | None = None
    phone_number: str | None = None
    date_of_birth: date | None = None


@dataclass(frozen=True)
class UserProfileUpdate:
    """Input for updating an existing account's profile.

    ``user_id`` identifies the record being updated so uniqueness checks
    can ignore the record's own values.
    """
    first_name: str
    last_name: str
    display_name: str | None = None
    phone_number: str | None = None
    date_of_birth: date | None = None
    user_id: str | None = None


@dataclass(frozen=True)
class RoleStatusChange:
    """Requested administrative change; ``None`` leaves the field as is."""
    role: UserRole | None = None
    status: UserStatus | None = None


def default_display_name(first_name: str, last_name: str, display_name: str | None) -> str:
    if display_name is None or not display_name.strip():
        return f"{first_name.strip()} {last_name.strip()}"
    return display_name.strip()


# ── User Domain Model ────────────────────────────────────


@dataclass
class User:
    """Domain model representing a user account."""
    id: str
    first_name: str
    last_name: str
    display_name: str
    email: str
    password_hash: str
    created_at: datetime
    phone_number: str | None = None
    date_of_birth: date | None = None
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    is_deleted: bool = False
    updated_at: datetime | None = None

    # ── factory ───────────────────────────────────────────

    @staticmethod
    def create(registration: UserRegistration, password_hash: str) -> 'User':
        """Create a new active User from an already-normalized registration."""
        return User(
            id=uuid.uuid4().hex,
            first_name=registration.first_name.strip(),
            last_name=registration.last_name.strip(),
            display_name=default_display_name(
                registration.first_name, registration.last_name, registration.display_name,
            ),
            email=registration.email,
            password_hash=password_hash,
            phone_number=registration.phone_number,
            date_of_birth=registration.date_of_birth,
            role=UserRole.USER,
            status=UserStatus.ACTIVE,
            is_deleted=False,
            created_at=datetime.now(timezone.utc),
        )

    # ── queries ───────────────────────────────────────────

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    # ── state transitions ─────────────────────────────────

    def apply_profile(self, update: UserProfileUpdate) -> None:
        """Replace profile fields with the (normalized) update."""
        self.first_name = update.first_name.strip()
        self.last_name = update.last_name.strip()
        self.display_name = default_display_name(
            update.first_name, update.last_name, update.display_name,
        )
        self.phone_number = update.phone_number
        self.date_of_birth = update.date_of_birth
        self.touch()

    def change_role(self, role: UserRole) -> None:
        self.role = role

    def change_status(self, status: UserStatus) -> None:
        self.status = status

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def delete(self) -> None:
        """Soft-delete user.

        Hook for the admin-side soft-delete path, which lives outside this
        service. Deleted records block re-registration and are hidden from
        lookups.
        """
        self.is_deleted = True
        self.touch()


@dataclass(frozen=True)
class UserView:
    """Outward-facing projection of a user. Carries no secrets."""
    id: str
    full_name: str
    display_name: str
    email: str
    phone_number: str | None
    role: UserRole
    status: UserStatus
    created_at: datetime
