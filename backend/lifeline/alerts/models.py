"""
models.py — Data structures for SOS alert delivery.

    DeliveryStatus   — outcome of one send
    DeliveryOutcome  — one contact's result (message id or error)
    AlertReport      — every outcome for one trigger, plus counts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass
class DeliveryOutcome:
    contact_name: Optional[str]
    phone: Optional[str]
    status: DeliveryStatus
    message_id: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == DeliveryStatus.DELIVERED

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "name": self.contact_name,
            "phone": self.phone,
            "status": self.status.value,
        }
        if self.message_id:
            d["messageId"] = self.message_id
        if self.error_message:
            d["error"] = self.error_message
        return d


@dataclass
class AlertReport:
    user_id: str
    outcomes: List[DeliveryOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def delivered(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return self.total - self.delivered

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "total": self.total,
            "delivered": self.delivered,
            "failed": self.failed,
            "startedAt": self.started_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "deliveries": [o.to_dict() for o in self.outcomes],
        }
