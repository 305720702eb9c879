"""Health endpoints for PostGate.

- /health: process is up (no dependencies touched)
- /health/live: liveness probe
- /health/ready: readiness probe, 503 when the database is unreachable
- /health/detailed: database, disk and memory checks
"""

import time
from datetime import datetime
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from postgate import __version__
from postgate.api.deps import get_db

router = APIRouter(prefix="/health", tags=["health"])

STARTED_AT = time.monotonic()

GB = 1024 ** 3

# (warning, critical) percent-used thresholds
DISK_THRESHOLDS = (85, 95)
MEMORY_THRESHOLDS = (85, 95)


def uptime_seconds() -> float:
    return round(time.monotonic() - STARTED_AT, 3)


def _now() -> str:
    return datetime.utcnow().isoformat()


def _usage_status(percent_used: float, warning: int, critical: int) -> str:
    if percent_used >= critical:
        return "critical"
    if percent_used >= warning:
        return "warning"
    return "healthy"


def check_database(db: Session) -> Dict[str, Any]:
    """Round-trip a trivial query."""
    started = time.monotonic()
    try:
        db.execute(text("SELECT 1")).scalar()
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
    return {
        "status": "healthy",
        "latency_ms": round((time.monotonic() - started) * 1000, 2),
        "dialect": db.get_bind().dialect.name,
    }


def check_disk(path: str = "/") -> Dict[str, Any]:
    try:
        usage = psutil.disk_usage(path)
    except OSError as e:
        return {"status": "unknown", "error": str(e)}
    return {
        "status": _usage_status(usage.percent, *DISK_THRESHOLDS),
        "free_gb": round(usage.free / GB, 2),
        "total_gb": round(usage.total / GB, 2),
        "percent_used": usage.percent,
    }


def check_memory() -> Dict[str, Any]:
    memory = psutil.virtual_memory()
    return {
        "status": _usage_status(memory.percent, *MEMORY_THRESHOLDS),
        "available_gb": round(memory.available / GB, 2),
        "total_gb": round(memory.total / GB, 2),
        "percent_used": memory.percent,
    }


def summarize(checks: Dict[str, Dict[str, Any]]) -> str:
    """Fold individual check statuses into healthy, degraded or unhealthy."""
    statuses = {check.get("status", "unknown") for check in checks.values()}
    if statuses & {"unhealthy", "critical"}:
        return "unhealthy"
    if "warning" in statuses:
        return "degraded"
    return "healthy"


@router.get("")
async def health_check():
    return {
        "status": "healthy",
        "version": __version__,
        "uptime": uptime_seconds(),
        "timestamp": _now(),
    }


@router.get("/live")
async def liveness_probe():
    return {"status": "alive", "timestamp": _now()}


@router.get("/ready")
async def readiness_probe(db: Session = Depends(get_db)):
    checks = {"database": check_database(db)}
    failed = [name for name, check in checks.items() if check["status"] == "unhealthy"]

    body: Dict[str, Any] = {
        "status": "not_ready" if failed else "ready",
        "checks": checks,
        "timestamp": _now(),
    }
    if failed:
        body["failed"] = failed
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    checks = {
        "database": check_database(db),
        "disk": check_disk(),
        "memory": check_memory(),
    }
    overall = summarize(checks)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE if overall == "unhealthy" else status.HTTP_200_OK,
        content={
            "status": overall,
            "version": __version__,
            "uptime": uptime_seconds(),
            "checks": checks,
            "timestamp": _now(),
        },
    )
