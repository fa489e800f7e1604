import hashlib, json
from datetime import datetime, timezone
from typing import Union

from fastapi import Request
from fastapi.responses import JSONResponse

from cookbook.errors import ConflictError
from cookbook.infra.redis_client import get_redis

DONE_TTL_SEC = 60 * 60 * 24
PROCESSING_TTL_SEC = 60

IDEMPOTENCY_HEADER = "Idempotency-Key"


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _hash_request(method: str, path: str, body_bytes: bytes) -> str:
    h = hashlib.sha256()
    h.update(method.encode("utf-8"))
    h.update(b"|")
    h.update(path.encode("utf-8"))
    h.update(b"|")
    h.update(body_bytes or b"")
    return h.hexdigest()


def _idemp_redis_key(route_key: str, idem_key: str) -> str:
    return f"cookbook:idemp:{route_key}:{idem_key}"


async def idempotency_precheck(
    request: Request, *, route_key: str
) -> Union[None, tuple[str, str], JSONResponse]:
    """Claim an Idempotency-Key before doing the work.

    Returns None when the header is absent (plain, non-idempotent request),
    (redis_key, request_hash) when the caller should proceed, or the stored
    JSONResponse when this key already completed.

    Raises:
        ConflictError: key reused with another payload, or still processing
    """
    idem_key = request.headers.get(IDEMPOTENCY_HEADER)
    if not idem_key:
        return None

    body_bytes = await request.body()
    req_hash = _hash_request(request.method, request.url.path, body_bytes)

    rkey = _idemp_redis_key(route_key, idem_key)
    r = await get_redis()

    raw = await r.get(rkey)
    if raw:
        data = json.loads(raw)
        if data.get("request_hash") and data["request_hash"] != req_hash:
            raise ConflictError("Idempotency-Key reused with different request payload")
        if data.get("state") == "done":
            return JSONResponse(content=data.get("body"), status_code=int(data.get("status", 200)))
        raise ConflictError("Request with this Idempotency-Key is still processing. Retry shortly.")

    processing_payload = {
        "state": "processing",
        "status": None,
        "body": None,
        "created_at": _iso_now(),
        "request_hash": req_hash,
    }
    ok = await r.set(rkey, json.dumps(processing_payload), ex=PROCESSING_TTL_SEC, nx=True)
    if not ok:
        # another request claimed the key between GET and SET
        raise ConflictError("Request with this Idempotency-Key is still processing. Retry shortly.")

    return (rkey, req_hash)


async def idempotency_store_result(redis_key: str, req_hash: str, *, status: int, body: dict):
    r = await get_redis()
    payload = {
        "state": "done",
        "status": int(status),
        "body": body,
        "completed_at": _iso_now(),
        "request_hash": req_hash,
    }
    await r.set(redis_key, json.dumps(payload), ex=DONE_TTL_SEC)


async def idempotency_clear_key(redis_key: str):
    """Release the key after a failed attempt so the client can retry."""
    r = await get_redis()
    await r.delete(redis_key)
