import logging
import sqlite3

from fastapi import APIRouter, Depends

from app.storage.db import SqliteStore, get_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", summary="Health Check", description="Check the health status of the application and its database.")
def health_check(store: SqliteStore = Depends(get_store)):
    try:
        store.init_db()
    except sqlite3.Error as exc:
        logger.warning("health_database_unavailable: %s", exc)
        return {"status": "degraded", "database": "unavailable"}
    return {"status": "healthy", "database": "ok"}
