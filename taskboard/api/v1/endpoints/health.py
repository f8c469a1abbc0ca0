"""
Health Check Endpoints
System health and monitoring endpoints
"""

from fastapi import APIRouter
import structlog
import time
import psutil
from typing import Dict, Any

from taskboard.core.database import check_database_health
from taskboard.schemas.base import HealthCheck, HealthStatus
from taskboard.services.reminder_scheduler import reminder_scheduler

logger = structlog.get_logger()
router = APIRouter()


@router.get("/", response_model=HealthCheck)
async def health_check() -> HealthCheck:
    """
    Comprehensive health check endpoint

    Returns:
        Health status with detailed checks
    """
    checks = {}
    overall_status = HealthStatus.HEALTHY

    try:
        db_healthy = await check_database_health()
        checks["database"] = {"status": "healthy" if db_healthy else "unhealthy"}
        if not db_healthy:
            overall_status = HealthStatus.UNHEALTHY

        memory = psutil.virtual_memory()
        checks["memory"] = {
            "status": "healthy" if memory.percent < 90 else "degraded" if memory.percent < 95 else "unhealthy",
            "usage_percent": memory.percent,
            "available_gb": round(memory.available / (1024**3), 2)
        }
        if memory.percent > 95:
            overall_status = HealthStatus.UNHEALTHY
        elif memory.percent > 90 and overall_status == HealthStatus.HEALTHY:
            overall_status = HealthStatus.DEGRADED

        checks["reminder_scheduler"] = {
            "status": "running" if reminder_scheduler.is_running() else "stopped",
            "schedules": sorted(reminder_scheduler.schedules),
        }

    except Exception as e:
        logger.error("Health check error", error=str(e))
        overall_status = HealthStatus.UNHEALTHY
        checks["error"] = {"message": str(e)}

    return HealthCheck(
        status=overall_status,
        service="taskboard-api",
        version="1.0.0",
        checks=checks
    )


@router.get("/ready")
async def readiness_check() -> Dict[str, Any]:
    """
    Kubernetes readiness probe endpoint

    Returns:
        Simple ready/not ready status
    """
    try:
        db_healthy = await check_database_health()

        if db_healthy:
            return {"status": "ready", "timestamp": time.time()}
        else:
            return {"status": "not ready", "reason": "database unavailable", "timestamp": time.time()}

    except Exception as e:
        logger.error("Readiness check error", error=str(e))
        return {"status": "not ready", "reason": str(e), "timestamp": time.time()}


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """
    Kubernetes liveness probe endpoint

    Returns:
        Simple alive status
    """
    return {"status": "alive", "timestamp": time.time()}
