from contextlib import asynccontextmanager
import logging

from app.storage.db import get_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    store = get_store()
    store.init_db()
    logger.info("database_ready path=%s", store.db_path)
    yield
    store.close()
