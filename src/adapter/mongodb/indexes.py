"""MongoDB index management utilities.

Shared index creation with conflict resolution, used by each Mongo repository.
"""

from logging import getLogger

from pymongo.errors import PyMongoError

logger = getLogger(__name__)


async def create_index_safe(collection, keys: list, name: str, **kwargs) -> bool:
    """Create index with conflict resolution.

    Handles two conflict scenarios:
    - Same name but different key spec or options (schema migration)
    - Same key spec but different name (rename)

    In both cases, drops the conflicting index and recreates with the desired spec.
    """
    try:
        await collection.create_index(keys, name=name, **kwargs)
        return True
    except PyMongoError as e:
        if "already exists" not in str(e) and "Conflict" not in str(e):
            raise
        return await _resolve_conflict(collection, keys, name, **kwargs)


async def _resolve_conflict(collection, keys: list, name: str, **kwargs) -> bool:
    """Drop conflicting index and recreate."""
    keys_dict = dict(keys)

    for idx_name, idx_info in (await collection.index_information()).items():
        if idx_name == '_id_':
            continue

        idx_keys = dict(idx_info.get('key', []))
        same_name = idx_name == name
        same_keys = idx_keys == keys_dict

        if same_name or same_keys:
            logger.warning(f"Dropping conflicting index: {idx_name}")
            await collection.drop_index(idx_name)
            await collection.create_index(keys, name=name, **kwargs)
            logger.info(f"Recreated index: {name}")
            return True

    logger.error(f"Failed to resolve index conflict for {name}")
    return False


async def ensure_all_indexes(db) -> bool:
    """Ensure indexes for all collections. Called at app startup."""
    from adapter.mongodb.audit_log import MongoAuditLog
    from adapter.mongodb.user_repository import MongoUserRepository

    results = [
        await MongoUserRepository(db).ensure_indexes(),
        await MongoAuditLog(db).ensure_indexes(),
    ]
    return all(results)
