"""MongoDB implementation of UserRepository."""

from datetime import date, datetime, time, timezone
from logging import getLogger

from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb.connection import USERS_COLLECTION_NAME
from domain.model.errors import DuplicateError, RepositoryError
from domain.model.user import User, UserRole, UserStatus

logger = getLogger(__name__)


def _date_to_bson(value: date | None) -> datetime | None:
    # BSON has no date-only type
    if value is None:
        return None
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _date_from_bson(value: datetime | None) -> date | None:
    if value is None:
        return None
    return value.date()


def _duplicate_error(e: DuplicateKeyError) -> DuplicateError:
    key_pattern = (e.details or {}).get('keyPattern', {})
    if 'phone_number' in key_pattern:
        return DuplicateError("Phone number is already in use by another account.")
    return DuplicateError("Email is already in use.")


class MongoUserRepository:
    def __init__(self, db: AsyncDatabase):
        self.collection = db[USERS_COLLECTION_NAME]

    # ── indexes ──────────────────────────────────────────────

    async def ensure_indexes(self) -> bool:
        """Create indexes for users collection.

        The unique indexes back up the service's uniqueness checks when two
        registrations race past them.
        """
        from adapter.mongodb.indexes import create_index_safe

        try:
            await create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            await create_index_safe(
                self.collection, [('phone_number', 1)], 'idx_users_phone_number',
                unique=True,
                partialFilterExpression={'phone_number': {'$type': 'string'}},
            )
            await create_index_safe(self.collection, [('is_deleted', 1)], 'idx_users_is_deleted')
            await create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            return True
        except Exception as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    # ── helpers ──────────────────────────────────────────────

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            first_name=doc['first_name'],
            last_name=doc['last_name'],
            display_name=doc['display_name'],
            email=doc['email'],
            password_hash=doc['password_hash'],
            created_at=doc['created_at'],
            phone_number=doc.get('phone_number'),
            date_of_birth=_date_from_bson(doc.get('date_of_birth')),
            role=UserRole(doc.get('role', UserRole.USER.value)),
            status=UserStatus(doc.get('status', UserStatus.ACTIVE.value)),
            is_deleted=doc.get('is_deleted', False),
            updated_at=doc.get('updated_at'),
        )

    def _to_document(self, user: User) -> dict:
        return {
            '_id': user.id,
            'first_name': user.first_name,
            'last_name': user.last_name,
            'display_name': user.display_name,
            'email': user.email,
            'password_hash': user.password_hash,
            'phone_number': user.phone_number,
            'date_of_birth': _date_to_bson(user.date_of_birth),
            'role': user.role.value,
            'status': user.status.value,
            'is_deleted': user.is_deleted,
            'created_at': user.created_at,
            'updated_at': user.updated_at,
        }

    async def _find_one(self, query: dict, context: dict) -> User | None:
        try:
            doc = await self.collection.find_one(query)
        except PyMongoError as e:
            logger.error("Failed to query users", extra={**context, "error": str(e)})
            raise RepositoryError("Failed to query users") from e
        return self._to_domain(doc) if doc else None

    # ── write operations ─────────────────────────────────────

    async def add(self, user: User) -> None:
        """Insert a new user document."""
        try:
            await self.collection.insert_one(self._to_document(user))
        except DuplicateKeyError as e:
            logger.warning("User creation failed: duplicate key", extra={"email": user.email})
            raise _duplicate_error(e) from e
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"email": user.email, "error": str(e)})
            raise RepositoryError("Failed to create user") from e

        logger.debug("User document inserted", extra={"userId": user.id})

    async def update(self, user_id: str, user: User) -> None:
        """Replace the whole user document."""
        try:
            result = await self.collection.replace_one({'_id': user_id}, self._to_document(user))
        except DuplicateKeyError as e:
            logger.warning("User update failed: duplicate key", extra={"userId": user_id})
            raise _duplicate_error(e) from e
        except PyMongoError as e:
            logger.error("Failed to update user", extra={"userId": user_id, "error": str(e)})
            raise RepositoryError("Failed to update user") from e

        if result.matched_count == 0:
            logger.warning("User not found for update", extra={"userId": user_id})

    # ── read operations ──────────────────────────────────────

    async def get_by_id(self, user_id: str) -> User | None:
        return await self._find_one({'_id': user_id}, {"userId": user_id})

    async def get_by_email(self, email: str) -> User | None:
        return await self._find_one(
            {'email': email, 'is_deleted': {'$ne': True}}, {"email": email},
        )

    async def get_by_phone(self, phone_number: str) -> User | None:
        return await self._find_one({'phone_number': phone_number}, {"phoneNumber": phone_number})

    async def get_deleted_by_email_or_phone(self, email: str | None, phone_number: str | None) -> User | None:
        identities = []
        if email:
            identities.append({'email': email})
        if phone_number:
            identities.append({'phone_number': phone_number})
        if not identities:
            return None

        return await self._find_one(
            {'is_deleted': True, '$or': identities},
            {"email": email, "phoneNumber": phone_number},
        )

    async def get_all(self) -> list[User]:
        try:
            docs = await self.collection.find({}).to_list(length=None)
        except PyMongoError as e:
            logger.error("Failed to list users", extra={"error": str(e)})
            raise RepositoryError("Failed to list users") from e
        return [self._to_domain(doc) for doc in docs]
