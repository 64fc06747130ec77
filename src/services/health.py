"""Dependency health checks behind ``GET /health``.

Used by container health checks and uptime monitoring.
"""

import asyncio
import os
import resource
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import redis.asyncio as redis

from src.logging import get_logger
from src.storage.database import Database

logger = get_logger(__name__)

# Track application start time for uptime calculation
_start_time: float = time.time()

APP_VERSION: str = os.environ.get("APP_VERSION", "0.0.0-dev")

CHECK_TIMEOUT_SECONDS = 5.0


@dataclass
class DependencyHealth:
    """Health status for a single dependency."""

    status: str  # "healthy" or "unhealthy"
    response_time_ms: int | None = None
    error: str | None = None


@dataclass
class ResourceMetrics:
    """Resource usage metrics for monitoring."""

    memory_rss_bytes: int
    cpu_user_seconds: float
    cpu_system_seconds: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "memory_rss_bytes": self.memory_rss_bytes,
            "cpu_user_seconds": round(self.cpu_user_seconds, 3),
            "cpu_system_seconds": round(self.cpu_system_seconds, 3),
        }


@dataclass
class HealthCheckResult:
    """Complete health check response."""

    status: str  # "healthy", "degraded", or "unhealthy"
    version: str
    uptime_seconds: int
    timestamp: str
    dependencies: dict[str, DependencyHealth] = field(default_factory=dict)
    resources: ResourceMetrics | None = None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "status": self.status,
            "version": self.version,
            "uptime_seconds": self.uptime_seconds,
            "timestamp": self.timestamp,
            "dependencies": {},
        }

        for name, dep in self.dependencies.items():
            dep_dict: dict[str, Any] = {"status": dep.status}
            if dep.response_time_ms is not None:
                dep_dict["response_time_ms"] = dep.response_time_ms
            if dep.error:
                dep_dict["error"] = dep.error
            result["dependencies"][name] = dep_dict

        if self.resources is not None:
            result["resources"] = self.resources.to_dict()
        if self.warnings:
            result["warnings"] = self.warnings
        if self.errors:
            result["errors"] = self.errors

        return result


def collect_resource_metrics() -> ResourceMetrics:
    """Current process memory and CPU usage."""
    usage = resource.getrusage(resource.RUSAGE_SELF)
    # ru_maxrss is KB on Linux
    return ResourceMetrics(
        memory_rss_bytes=usage.ru_maxrss * 1024,
        cpu_user_seconds=usage.ru_utime,
        cpu_system_seconds=usage.ru_stime,
    )


async def check_postgres_health(db: Database) -> DependencyHealth:
    """Check PostgreSQL connectivity with a trivial query."""
    if not db.is_connected:
        return DependencyHealth(status="unhealthy", error="Database not connected")

    start = time.perf_counter()
    try:
        await asyncio.wait_for(db.ping(), timeout=CHECK_TIMEOUT_SECONDS)
        response_time = int((time.perf_counter() - start) * 1000)
        return DependencyHealth(status="healthy", response_time_ms=response_time)
    except Exception as e:
        logger.error("postgres_health_check_failed", error=str(e))
        return DependencyHealth(
            status="unhealthy",
            error=f"Connection failed: {str(e)[:100]}",
        )


async def check_redis_health(redis_url: str) -> DependencyHealth:
    """Check Redis connectivity with PING."""
    start = time.perf_counter()
    client = None
    try:
        client = redis.from_url(redis_url, socket_timeout=CHECK_TIMEOUT_SECONDS)
        await client.ping()
        response_time = int((time.perf_counter() - start) * 1000)
        return DependencyHealth(status="healthy", response_time_ms=response_time)
    except Exception as e:
        logger.error("redis_health_check_failed", error=str(e))
        return DependencyHealth(
            status="unhealthy",
            error=f"Connection failed: {str(e)[:100]}",
        )
    finally:
        if client:
            await client.aclose()


async def perform_health_check(
    db: Database | None = None,
    redis_url: str | None = None,
    include_resources: bool = True,
) -> HealthCheckResult:
    """Check every dependency and derive the overall status.

    All dependencies down is ``unhealthy``; some down is ``degraded``.
    """
    result = HealthCheckResult(
        status="healthy",
        version=APP_VERSION,
        uptime_seconds=int(time.time() - _start_time),
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )

    if include_resources:
        result.resources = collect_resource_metrics()

    if db is not None:
        result.dependencies["postgres"] = await check_postgres_health(db)
    else:
        result.dependencies["postgres"] = DependencyHealth(
            status="unhealthy",
            error="Database not available",
        )
        result.warnings.append("Database check skipped - not configured")

    if redis_url:
        result.dependencies["redis"] = await check_redis_health(redis_url)
    else:
        result.dependencies["redis"] = DependencyHealth(
            status="unhealthy",
            error="Redis URL not configured",
        )
        result.warnings.append("Redis check skipped - URL not configured")

    unhealthy_deps = [
        name for name, dep in result.dependencies.items() if dep.status == "unhealthy"
    ]

    if len(unhealthy_deps) == len(result.dependencies):
        result.status = "unhealthy"
        result.errors = [f"Critical: {dep} connection failed" for dep in unhealthy_deps]
    elif unhealthy_deps:
        result.status = "degraded"
        for dep in unhealthy_deps:
            result.warnings.append(f"{dep.capitalize()} unavailable")

    return result


def get_http_status_code(health_status: str) -> int:
    """503 when unhealthy, 200 otherwise."""
    if health_status == "unhealthy":
        return 503
    return 200


def reset_start_time() -> None:
    """Reset start time for testing purposes."""
    global _start_time
    _start_time = time.time()
