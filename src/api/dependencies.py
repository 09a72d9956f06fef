import logging
from functools import lru_cache

from fastapi import Depends, HTTPException

from adapter.email.smtp_notifier import SMTPSettings, SmtpWelcomeNotifier
from adapter.mongodb.audit_log import MongoAuditLog
from adapter.mongodb.connection import get_mongodb_client, DATABASE_NAME
from adapter.mongodb.user_repository import MongoUserRepository
from port.audit_log import AuditLog
from port.notification import NotificationPort
from port.user_repository import UserRepository
from services.user_service import UserService
from services.validators import PasswordPolicy, registration_validators, update_validators

logger = logging.getLogger(__name__)


async def _get_db():
    """Get MongoDB database, raising 503 if unavailable."""
    client = await get_mongodb_client()
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return client[DATABASE_NAME]


async def get_user_repo() -> UserRepository:
    return MongoUserRepository(await _get_db())


async def get_audit_log() -> AuditLog:
    return MongoAuditLog(await _get_db())


@lru_cache
def get_notifier() -> NotificationPort | None:
    settings = SMTPSettings.from_env()
    if settings is None:
        logger.warning("SMTP_HOST not configured, welcome emails disabled")
        return None
    return SmtpWelcomeNotifier(settings)


@lru_cache
def get_password_policy() -> PasswordPolicy:
    return PasswordPolicy.from_env()


def get_user_service(
    repo: UserRepository = Depends(get_user_repo),
    audit_log: AuditLog = Depends(get_audit_log),
    notifier: NotificationPort | None = Depends(get_notifier),
    password_policy: PasswordPolicy = Depends(get_password_policy),
) -> UserService:
    return UserService(
        repo,
        registration_validators=registration_validators(repo, password_policy),
        update_validators=update_validators(repo),
        notifier=notifier,
        audit_log=audit_log,
    )
