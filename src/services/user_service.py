"""User service: registration, profile update and role/status administration.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.

Flow per mutation: normalize → validate (fail-fast chain) → mutate → persist → view
"""

import asyncio
import logging
import os
from dataclasses import replace

import bcrypt

from domain.model.audit import AuditEvent
from domain.model.errors import NotFoundError, PermissionDeniedError, ValidationError
from domain.model.user import (
    RoleStatusChange,
    User,
    UserProfileUpdate,
    UserRegistration,
    UserView,
)
from port.audit_log import AuditLog
from port.notification import NotificationPort
from port.user_repository import UserRepository
from services.normalization import normalize_email, normalize_phone
from services.user_mapper import to_view
from services.validators import Validator, run_validators

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger('audit')

BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', '12'))

# Welcome-email tasks in flight
_background_tasks: set[asyncio.Task] = set()


def _hash_password(password: str, rounds: int) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def _audit_fields(event: AuditEvent) -> dict:
    return {
        "targetUserId": event.target_user_id,
        "performedBy": event.performed_by,
        "attribute": event.attribute,
        "oldValue": event.old_value,
        "newValue": event.new_value,
        "occurredAt": event.occurred_at.isoformat(),
    }


async def wait_for_background_tasks() -> None:
    """Wait for pending welcome notifications to finish."""
    if _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)


class UserService:
    def __init__(
        self,
        repo: UserRepository,
        registration_validators: list[Validator],
        update_validators: list[Validator],
        notifier: NotificationPort | None = None,
        audit_log: AuditLog | None = None,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ):
        self.repo = repo
        self.registration_validators = registration_validators
        self.update_validators = update_validators
        self.notifier = notifier
        self.audit_log = audit_log
        self.bcrypt_rounds = bcrypt_rounds

    # ── commands ─────────────────────────────────────────────

    async def register(self, registration: UserRegistration) -> UserView:
        """Register a new user.

        Raises:
            ValidationError: a registration rule failed (DuplicateError for
                email/phone conflicts)
        """
        registration = replace(
            registration,
            email=normalize_email(registration.email),
            phone_number=normalize_phone(registration.phone_number),
        )
        if registration.email is None:
            raise ValidationError("Email is required.")

        await run_validators(self.registration_validators, registration)

        password_hash = await asyncio.to_thread(
            _hash_password, registration.password, self.bcrypt_rounds,
        )
        user = User.create(registration, password_hash)
        await self.repo.add(user)

        logger.info("User registered", extra={"userId": user.id, "email": user.email})

        self._schedule_welcome(user)
        return to_view(user)

    async def update(self, user_id: str, update: UserProfileUpdate) -> UserView:
        """Update a user's profile fields.

        Raises:
            NotFoundError: user missing or soft-deleted
            ValidationError: an update rule failed
        """
        user = await self._get_active(user_id)
        if user is None:
            raise NotFoundError("User not found.")

        update = replace(update, user_id=user_id, phone_number=normalize_phone(update.phone_number))
        await run_validators(self.update_validators, update)

        user.apply_profile(update)
        await self.repo.update(user_id, user)

        logger.info("User updated", extra={"userId": user_id})
        return to_view(user)

    async def update_role_status(
        self,
        user_id: str,
        change: RoleStatusChange,
        performed_by: str | None,
    ) -> UserView:
        """Change a user's role and/or status on behalf of an administrator.

        Each field that actually changes produces one AuditEvent. The record
        is stamped and saved even when nothing changed. Audit sink failures
        after the save are logged on the audit logger, not raised.

        Raises:
            PermissionDeniedError: performer missing, deleted or not an Admin
            NotFoundError: target missing or soft-deleted
        """
        performer = await self._get_active(performed_by) if performed_by else None
        if performer is None or not performer.is_admin:
            logger.warning("Role/status change denied", extra={
                "userId": user_id, "performedBy": performed_by,
            })
            raise PermissionDeniedError("Only administrators can perform role or status changes.")

        user = await self._get_active(user_id)
        if user is None:
            raise NotFoundError("Target user not found.")

        events: list[AuditEvent] = []
        if change.role is not None and change.role != user.role:
            events.append(AuditEvent(
                target_user_id=user.id,
                performed_by=performer.id,
                attribute='role',
                old_value=user.role.value,
                new_value=change.role.value,
            ))
            user.change_role(change.role)

        if change.status is not None and change.status != user.status:
            events.append(AuditEvent(
                target_user_id=user.id,
                performed_by=performer.id,
                attribute='status',
                old_value=user.status.value,
                new_value=change.status.value,
            ))
            user.change_status(change.status)

        user.touch()
        await self.repo.update(user_id, user)

        for event in events:
            await self._record_audit(event)

        return to_view(user)

    # ── queries ──────────────────────────────────────────────

    async def get_by_id(self, user_id: str) -> UserView | None:
        user = await self._get_active(user_id)
        return to_view(user) if user else None

    async def get_all(self) -> list[UserView]:
        users = await self.repo.get_all()
        return [to_view(u) for u in users if not u.is_deleted]

    # ── helpers ──────────────────────────────────────────────

    async def _get_active(self, user_id: str) -> User | None:
        user = await self.repo.get_by_id(user_id)
        if user is None or user.is_deleted:
            return None
        return user

    async def _record_audit(self, event: AuditEvent) -> None:
        audit_logger.info("User %s changed", event.attribute, extra=_audit_fields(event))
        if self.audit_log is None:
            return
        try:
            await self.audit_log.record(event)
        except Exception as e:
            # The change is already saved; remaining events still get recorded
            audit_logger.error("Audit event not recorded", extra={
                **_audit_fields(event), "error": str(e),
            })

    def _schedule_welcome(self, user: User) -> None:
        if self.notifier is None:
            return
        task = asyncio.create_task(self._send_welcome(user.email, user.display_name))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)

    async def _send_welcome(self, email: str, display_name: str) -> None:
        try:
            await self.notifier.send_welcome(email, display_name)
        except Exception as e:
            # Best-effort: never reaches the caller
            logger.error("Welcome notification failed", extra={"email": email, "error": str(e)})
