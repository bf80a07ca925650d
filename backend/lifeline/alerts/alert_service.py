"""
alert_service.py — SOS alert fan-out.

    trigger(user_id)
        1. load the EmergencyProfile       (missing → NotFoundError)
        2. format one alert body from name / blood group / phone
        3. start one send per emergency contact, all at once
        4. wait until every send has settled
        5. return an AlertReport with one DeliveryOutcome per contact

A failed send is recorded and logged; it never cancels the other sends and
never fails the trigger. Only a failure to load the profile does. Total
latency is that of the slowest single send.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from backend.lifeline.alerts.models import AlertReport, DeliveryOutcome, DeliveryStatus
from backend.lifeline.core.errors import NotFoundError
from backend.lifeline.records.schemas import EmergencyContact, EmergencyProfile
from backend.lifeline.records.store import RecordStore

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "No emergency contacts found"


class MessageSender(Protocol):
    async def send(self, body: str, to: Optional[str]) -> str: ...


def format_alert_message(profile: EmergencyProfile) -> str:
    return (
        f"🚨 EMERGENCY ALERT! {profile.name} needs help! "
        f"Blood Group: {profile.blood_group}, Contact: {profile.phone}."
    )


class SosAlertService:
    def __init__(self, store: RecordStore, sender: MessageSender):
        self.store = store
        self.sender = sender

    async def trigger(self, user_id: str) -> AlertReport:
        profile = await self.store.get_profile(user_id)
        if profile is None:
            raise NotFoundError(NOT_FOUND_MESSAGE, user_id=user_id)

        body = format_alert_message(profile)
        contacts = profile.emergency_contacts
        logger.warning(
            "🚨 ALERT! %s triggered SOS! Sending SMS to %d contact(s)...",
            profile.name, len(contacts),
            extra={"user_id": user_id, "contact_count": len(contacts)},
        )

        report = AlertReport(user_id=user_id)
        report.outcomes = await self._dispatch_all(body, contacts)
        report.completed_at = datetime.now(timezone.utc)

        logger.info(
            "SOS alert for %s settled: %d delivered, %d failed",
            user_id, report.delivered, report.failed,
            extra={
                "user_id": user_id,
                "delivered": report.delivered,
                "failed": report.failed,
            },
        )
        return report

    async def _dispatch_all(
        self, body: str, contacts: List[EmergencyContact],
    ) -> List[DeliveryOutcome]:
        results = await asyncio.gather(
            *(self.sender.send(body, contact.phone) for contact in contacts),
            return_exceptions=True,
        )
        return [
            self._to_outcome(contact, result)
            for contact, result in zip(contacts, results)
        ]

    @staticmethod
    def _to_outcome(contact: EmergencyContact, result) -> DeliveryOutcome:
        if isinstance(result, Exception):
            logger.error(
                "❌ Error sending SMS to %s: %s", contact.name, result,
            )
            return DeliveryOutcome(
                contact_name=contact.name,
                phone=contact.phone,
                status=DeliveryStatus.FAILED,
                error_message=str(result),
            )
        if isinstance(result, BaseException):
            raise result

        logger.info("✔ SMS sent to %s (%s): %s", contact.name, contact.phone, result)
        return DeliveryOutcome(
            contact_name=contact.name,
            phone=contact.phone,
            status=DeliveryStatus.DELIVERED,
            message_id=result,
        )
