import os
import logging
from pymongo import AsyncMongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

logger = logging.getLogger(__name__)

# Set pymongo logger to WARNING to reduce noise from driver-level logs
pymongo_logger = logging.getLogger('pymongo')
pymongo_logger.setLevel(logging.WARNING)

MONGO_URL = os.getenv('MONGO_URL')
DATABASE_NAME = os.getenv('MONGODB_DATABASE', 'user_management')
USERS_COLLECTION_NAME = 'users'
AUDIT_LOG_COLLECTION_NAME = 'user_audit_log'

_client_cache: AsyncMongoClient | None = None
_connection_failed = False


def reset_client():
    global _client_cache, _connection_failed
    _client_cache = None
    _connection_failed = False


async def get_mongodb_client() -> AsyncMongoClient | None:
    """Get the shared async MongoDB client, connecting on first use.

    Connection strategy:
    1. Return cached client if one was established
    2. Otherwise connect and verify with a ping
    3. If the connection string is missing, don't retry

    Returns:
        MongoDB client or None if connection fails
    """
    global _client_cache, _connection_failed

    if _client_cache is not None:
        return _client_cache

    # Don't retry if configuration is missing
    if _connection_failed:
        return None

    if not MONGO_URL:
        logger.error("[MONGODB] MONGO_URL not configured.")
        _connection_failed = True
        return None

    client = AsyncMongoClient(
        MONGO_URL,
        serverSelectionTimeoutMS=5000,  # 5s timeout for server selection
        connectTimeoutMS=5000,  # 5s timeout for initial connection
        socketTimeoutMS=30000,  # 30s timeout for operations
        maxPoolSize=20,
        minPoolSize=0,
        maxIdleTimeMS=30000,
        waitQueueTimeoutMS=10000,
        retryWrites=True,
        retryReads=True,
        tz_aware=True,
    )
    try:
        await client.admin.command('ping')
    except (ConnectionFailure, PyMongoError) as e:
        # Transient: the next request tries again
        logger.error(f"[MONGODB] Connection failed: {str(e)[:200]}")
        await client.close()
        return None

    _client_cache = client
    logger.info(f"[MONGODB] Connected successfully to {DATABASE_NAME}")
    return client


async def close_client() -> None:
    """Close the shared client (app shutdown)."""
    global _client_cache
    if _client_cache is not None:
        await _client_cache.close()
        _client_cache = None
