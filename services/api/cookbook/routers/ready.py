import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from redis.exceptions import RedisError

from cookbook.db import get_db
from cookbook.infra.redis_client import get_redis

router = APIRouter()
logger = logging.getLogger("cookbook.ready")


def _db_ready(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        logger.warning(f"Database not ready: {exc}")
        return False


@router.get("/ready")
async def ready(db: Session = Depends(get_db)):
    # blocking driver call, keep it off the event loop
    db_ok = await run_in_threadpool(_db_ready, db)

    redis_ok = False
    try:
        r = await get_redis()
        redis_ok = bool(await r.ping())
    except (RedisError, OSError) as exc:
        logger.warning(f"Redis not ready: {exc}")
    return {"ok": True, "db_ok": db_ok, "redis_ok": redis_ok}
