from fastapi import APIRouter
from fastapi.responses import JSONResponse

from picito.db import db_ping
from picito.redis_client import redis_ping

router = APIRouter(tags=["health"])

@router.get("/health")
def health() -> dict:
    return {"status": "ok"}

# readiness probe, 503 with per-dependency details when db or redis is down
@router.get("/ready")
def ready():
    checks = {name: bool(fn()) for name, fn in (("db", db_ping), ("redis", redis_ping))}
    ok = all(checks.values())
    return JSONResponse(
        status_code=200 if ok else 503,
        content={"status": "ok" if ok else "unready", "checks": checks},
    )
