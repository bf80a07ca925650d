"""
Health check aggregation.

Checks:
    • Database connectivity (SELECT 1 through the record store)
    • Provider configuration (Places key, SMS credentials, Gemini key)

An unreachable database makes the service unhealthy; a missing provider
credential only degrades it, since the other endpoints keep working.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from backend.lifeline.core.config import Settings
from backend.lifeline.core.errors import StorageError
from backend.lifeline.records.store import RecordStore

logger = logging.getLogger(__name__)

_start_time = time.monotonic()


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    name: str
    status: HealthStatus = HealthStatus.HEALTHY
    latency_ms: float = 0.0
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            d["message"] = self.message
        if self.details:
            d["details"] = self.details
        return d


@dataclass
class HealthReport:
    version: str
    environment: str
    status: HealthStatus = HealthStatus.HEALTHY
    timestamp: str = ""
    uptime_seconds: float = 0.0
    components: List[ComponentHealth] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "version": self.version,
            "environment": self.environment,
            "timestamp": self.timestamp or datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": round(self.uptime_seconds, 1),
            "components": [c.to_dict() for c in self.components],
        }


async def check_database(store: RecordStore) -> ComponentHealth:
    comp = ComponentHealth(name="database")
    start = time.monotonic()
    try:
        await store.ping()
        comp.message = "Connection available"
    except StorageError as e:
        logger.error("Database health check failed: %s", e.message)
        comp.status = HealthStatus.UNHEALTHY
        comp.message = e.message
    comp.latency_ms = (time.monotonic() - start) * 1000
    return comp


def check_providers(settings: Settings) -> ComponentHealth:
    comp = ComponentHealth(name="providers")
    sms_ready = settings.SMS_PROVIDER.lower() == "simulation" or all(
        (settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, settings.TWILIO_PHONE_NUMBER)
    )
    configured = {
        "places": bool(settings.GOOGLE_MAPS_API_KEY),
        "sms": sms_ready,
        "chat": bool(settings.GEMINI_API_KEY),
    }
    missing = [name for name, ok in configured.items() if not ok]
    if missing:
        comp.status = HealthStatus.DEGRADED
        comp.message = f"Not configured: {', '.join(missing)}"
    else:
        comp.message = "All providers configured"
    comp.details = {"configured": configured, "sms_provider": settings.SMS_PROVIDER}
    return comp


async def run_health_check(store: RecordStore, settings: Settings) -> HealthReport:
    report = HealthReport(
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_seconds=time.monotonic() - _start_time,
    )
    report.components.append(await check_database(store))
    report.components.append(check_providers(settings))

    statuses = [c.status for c in report.components]
    if HealthStatus.UNHEALTHY in statuses:
        report.status = HealthStatus.UNHEALTHY
    elif HealthStatus.DEGRADED in statuses:
        report.status = HealthStatus.DEGRADED

    return report
