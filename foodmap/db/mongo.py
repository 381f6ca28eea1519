# foodmap/db/mongo.py
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from foodmap.core.config import get_settings
import certifi

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_client() -> AsyncIOMotorClient:
    assert _client is not None, "Mongo client not initialized"
    return _client


def get_db() -> AsyncIOMotorDatabase:
    assert _db is not None, "Mongo DB not initialized"
    return _db


def _new_client(uri: str, tls: bool) -> AsyncIOMotorClient:
    options = dict(
        tz_aware=True,                      # timestamps come back as aware UTC datetimes
        uuidRepresentation="standard",
        serverSelectionTimeoutMS=6000,
        connectTimeoutMS=6000,
    )
    if tls:
        options.update(tls=True, tlsCAFile=certifi.where())
    return AsyncIOMotorClient(uri, **options)


async def connect():
    """
    Create the Motor client and ping the server.
    A failed ping is logged, not raised: the client stays lazy and the first
    real query retries the connection.
    """
    global _client, _db
    settings = get_settings()
    uri = settings.database_uri()
    if not uri:
        raise RuntimeError("No MONGO_URI or DB_HOST configured")

    _client = _new_client(uri, settings.MONGO_TLS)
    _db = _client[settings.MONGO_DB]
    try:
        await _client.admin.command("ping")
        logger.info("Mongo connected (ping ok) db=%s", settings.MONGO_DB)
    except Exception as e:
        logger.warning("Mongo ping at startup failed, will connect lazily: %s", e)


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
