"""Business-rule validators for user registration and profile updates.

Each validator checks one rule and raises ValidationError (or DuplicateError)
with a user-facing message. Chains are plain lists composed by the factories
at the bottom of this module and run fail-fast by run_validators().
"""

import os
import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Protocol

from domain.model.errors import DuplicateError, ValidationError
from domain.model.user import UserProfile, UserProfileUpdate, UserRegistration
from port.user_repository import UserRepository

MINIMUM_AGE = 13

# bcrypt only accepts this many bytes of input
MAX_PASSWORD_BYTES = 72


class Validator(Protocol):
    async def validate(self, context) -> None: ...


async def run_validators(validators: Iterable[Validator], context) -> None:
    """Run validators in order. The first violation propagates."""
    for validator in validators:
        await validator.validate(context)


# ── Contact uniqueness ───────────────────────────────────


class EmailUniquenessValidator:
    def __init__(self, repo: UserRepository):
        self.repo = repo

    async def validate(self, context: UserRegistration) -> None:
        if await self.repo.get_by_email(context.email):
            raise DuplicateError("Email is already in use.")


class PhoneUniquenessValidator:
    """Reject a phone number held by another account.

    On update the record's own current number is allowed, identified by
    ``context.user_id``.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    async def validate(self, context: UserProfile) -> None:
        if not context.phone_number:
            return

        existing = await self.repo.get_by_phone(context.phone_number)
        if existing is None:
            return
        if isinstance(context, UserProfileUpdate) and existing.id == context.user_id:
            return
        raise DuplicateError("Phone number is already in use by another account.")


class SoftDeleteValidator:
    def __init__(self, repo: UserRepository):
        self.repo = repo

    async def validate(self, context: UserRegistration) -> None:
        deleted = await self.repo.get_deleted_by_email_or_phone(context.email, context.phone_number)
        if deleted:
            raise ValidationError(
                "This account was previously deleted. Please contact an admin for restoration."
            )


# ── Policies ─────────────────────────────────────────────


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class PasswordPolicy:
    """Password strength requirements."""
    min_length: int = 8
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True
    require_symbol: bool = False

    @classmethod
    def from_env(cls) -> 'PasswordPolicy':
        return cls(
            min_length=int(os.getenv('PASSWORD_MIN_LENGTH', '8')),
            require_uppercase=_env_flag('PASSWORD_REQUIRE_UPPERCASE', True),
            require_lowercase=_env_flag('PASSWORD_REQUIRE_LOWERCASE', True),
            require_digit=_env_flag('PASSWORD_REQUIRE_DIGIT', True),
            require_symbol=_env_flag('PASSWORD_REQUIRE_SYMBOL', False),
        )


class PasswordPolicyValidator:
    def __init__(self, policy: PasswordPolicy | None = None):
        self.policy = policy or PasswordPolicy()

    async def validate(self, context: UserRegistration) -> None:
        password = context.password or ''
        policy = self.policy

        if len(password) < policy.min_length:
            raise ValidationError(f"Password must be at least {policy.min_length} characters")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        if policy.require_uppercase and not re.search(r'[A-Z]', password):
            raise ValidationError("Password must contain at least one uppercase letter")
        if policy.require_lowercase and not re.search(r'[a-z]', password):
            raise ValidationError("Password must contain at least one lowercase letter")
        if policy.require_digit and not re.search(r'[0-9]', password):
            raise ValidationError("Password must contain at least one number")
        if policy.require_symbol and not re.search(r'[^A-Za-z0-9]', password):
            raise ValidationError("Password must contain at least one special character")


def calculate_age(date_of_birth: date, today: date) -> int:
    """Whole years between date_of_birth and today."""
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


class AgePolicyValidator:
    def __init__(self, minimum_age: int = MINIMUM_AGE, today: Callable[[], date] = date.today):
        self.minimum_age = minimum_age
        self.today = today

    async def validate(self, context: UserProfile) -> None:
        if context.date_of_birth is None:
            return
        if calculate_age(context.date_of_birth, self.today()) < self.minimum_age:
            raise ValidationError(f"Users must be at least {self.minimum_age} years old.")


# ── Chains ───────────────────────────────────────────────


def registration_validators(
    repo: UserRepository,
    password_policy: PasswordPolicy | None = None,
    today: Callable[[], date] = date.today,
) -> list[Validator]:
    return [
        EmailUniquenessValidator(repo),
        PhoneUniquenessValidator(repo),
        SoftDeleteValidator(repo),
        PasswordPolicyValidator(password_policy),
        AgePolicyValidator(today=today),
    ]


def update_validators(repo: UserRepository, today: Callable[[], date] = date.today) -> list[Validator]:
    return [
        PhoneUniquenessValidator(repo),
        AgePolicyValidator(today=today),
    ]
