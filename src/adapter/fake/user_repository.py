"""In-memory implementation of UserRepository for testing."""

from dataclasses import replace

from domain.model.errors import DuplicateError
from domain.model.user import User


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}

    # ── write operations ─────────────────────────────────────

    async def add(self, user: User) -> None:
        if user.id in self.store:
            raise DuplicateError("User id already exists")
        if any(u.email == user.email for u in self.store.values()):
            raise DuplicateError("Email is already in use.")
        if user.phone_number and any(u.phone_number == user.phone_number for u in self.store.values()):
            raise DuplicateError("Phone number is already in use by another account.")
        self.store[user.id] = replace(user)

    async def update(self, user_id: str, user: User) -> None:
        if user_id not in self.store:
            return
        others = [u for uid, u in self.store.items() if uid != user_id]
        if any(u.email == user.email for u in others):
            raise DuplicateError("Email is already in use.")
        if user.phone_number and any(u.phone_number == user.phone_number for u in others):
            raise DuplicateError("Phone number is already in use by another account.")
        self.store[user_id] = replace(user)

    # ── read operations ──────────────────────────────────────

    async def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return replace(user) if user else None

    async def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email and not user.is_deleted:
                return replace(user)
        return None

    async def get_by_phone(self, phone_number: str) -> User | None:
        for user in self.store.values():
            if user.phone_number == phone_number:
                return replace(user)
        return None

    async def get_deleted_by_email_or_phone(self, email: str | None, phone_number: str | None) -> User | None:
        for user in self.store.values():
            if not user.is_deleted:
                continue
            if (email and user.email == email) or (phone_number and user.phone_number == phone_number):
                return replace(user)
        return None

    async def get_all(self) -> list[User]:
        return [replace(u) for u in self.store.values()]
