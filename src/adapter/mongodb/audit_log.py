"""MongoDB implementation of AuditLog."""

import uuid
from logging import getLogger

from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from adapter.mongodb.connection import AUDIT_LOG_COLLECTION_NAME
from domain.model.audit import AuditEvent
from domain.model.errors import RepositoryError

logger = getLogger(__name__)


class MongoAuditLog:
    def __init__(self, db: AsyncDatabase):
        self.collection = db[AUDIT_LOG_COLLECTION_NAME]

    async def ensure_indexes(self) -> bool:
        """Create indexes for the audit log collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            await create_index_safe(self.collection, [
                ('target_user_id', 1),
                ('occurred_at', -1),
            ], 'idx_audit_target_occurred_at')
            await create_index_safe(self.collection, [('performed_by', 1)], 'idx_audit_performed_by')
            return True
        except Exception as e:
            logger.error("Failed to create audit log indexes", extra={"error": str(e)})
            return False

    async def record(self, event: AuditEvent) -> None:
        doc = {'_id': uuid.uuid4().hex, **event.to_dict()}
        try:
            await self.collection.insert_one(doc)
        except PyMongoError as e:
            logger.error("Failed to record audit event", extra={
                "targetUserId": event.target_user_id, "error": str(e),
            })
            raise RepositoryError("Failed to record audit event") from e
