from typing import Protocol
from domain.model.user import User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Implementations raise RepositoryError when the backend fails, so a
    lookup returning None always means "no such record".
    """
    async def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID, soft-deleted or not. Return User or None if not found."""
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Find a non-deleted user by normalized email."""
        ...

    async def get_by_phone(self, phone_number: str) -> User | None:
        """Find any user holding the normalized phone number."""
        ...

    async def get_deleted_by_email_or_phone(self, email: str | None, phone_number: str | None) -> User | None:
        """Find a soft-deleted user holding either contact identity."""
        ...

    async def add(self, user: User) -> None:
        """Insert a new user. Raise DuplicateError on a unique key conflict."""
        ...

    async def update(self, user_id: str, user: User) -> None:
        """Replace the stored user with the given state."""
        ...

    async def get_all(self) -> list[User]:
        """Return all users, soft-deleted included."""
        ...
