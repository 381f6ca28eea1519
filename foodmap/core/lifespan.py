# foodmap/core/lifespan.py
import logging
from contextlib import asynccontextmanager
from zoneinfo import ZoneInfo

from fastapi import FastAPI
from foodmap.db import mongo, redis as r
from foodmap.core.config import get_settings
from foodmap.domain.repositories.store_cache_repo import CachedStoreRepo
from foodmap.domain.repositories.store_repo import StoreRepo
from foodmap.domain.repositories.user_repo import UserRepo
from foodmap.domain.services.store_svc import StoreService
from foodmap.domain.services.user_svc import UserService
from foodmap.domain.services.validator import Validator

logger = logging.getLogger(__name__)


async def build_services(app: FastAPI) -> None:
    """
    Composition root: one Validator for the whole process, one repository
    per collection, the store repository wrapped by the Redis cache when
    Redis is up.
    """
    settings = get_settings()
    db = mongo.get_db()
    validator = Validator()

    store_repo = StoreRepo(db)
    user_repo = UserRepo(db)
    for repo in (store_repo, user_repo):
        try:
            await repo.ensure_indexes()
        except Exception as e:
            logger.warning("index creation failed for %s: %s", repo.col.name, e)

    stores = store_repo
    redis_client = r.get_redis()
    if redis_client is not None:
        stores = CachedStoreRepo(store_repo, redis_client, settings.store_cache_ttl, settings.store_cache_prefix)

    app.state.validator = validator
    app.state.store_service = StoreService(stores, validator, tz=ZoneInfo(settings.STORE_TIMEZONE))
    app.state.user_service = UserService(user_repo, validator)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    await mongo.connect()
    await r.connect()          # optional, never raises
    await build_services(app)

    yield

    # --- Shutdown ---
    await r.disconnect()
    await mongo.disconnect()
    logger.info("shutdown complete")
