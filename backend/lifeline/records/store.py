"""
RecordStore — create/read/update against the two record collections.

    list_first_aid()          → every FirstAidEntry
    get_profile(user_id)      → EmergencyProfile | None
    upsert_profile(profile)   → UpsertResult(created=True|False)

Every database failure, including a refused connection, surfaces as
StorageError. Upsert is not serialised against concurrent writers for the
same user id: the last write wins, and two simultaneous first submissions
collide on the unique key and one of them reports StorageError.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from backend.lifeline.core.database import Database
from backend.lifeline.core.errors import StorageError
from backend.lifeline.records.models import FirstAidRecord, SosProfileRecord
from backend.lifeline.records.schemas import (
    EmergencyProfile,
    FirstAidEntry,
    UpsertResult,
)

logger = logging.getLogger(__name__)

# asyncpg raises plain OSError subclasses when the server refuses the connection
_STORAGE_FAILURES = (SQLAlchemyError, OSError)


class RecordStore:
    def __init__(self, database: Database):
        self.database = database

    async def ping(self) -> None:
        try:
            await self.database.ping()
        except _STORAGE_FAILURES as exc:
            raise StorageError("ping", str(exc)) from exc

    async def list_first_aid(self) -> List[FirstAidEntry]:
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(FirstAidRecord).order_by(FirstAidRecord.id)
                )
                return [row.to_entry() for row in result.scalars().all()]
        except _STORAGE_FAILURES as exc:
            logger.error("Error fetching first aid data: %s", exc)
            raise StorageError("list_first_aid") from exc

    async def get_profile(self, user_id: str) -> Optional[EmergencyProfile]:
        try:
            async with self.database.session() as session:
                record = await self._find_profile(session, user_id)
                return record.to_profile() if record else None
        except _STORAGE_FAILURES as exc:
            logger.error("Error fetching SOS data for %s: %s", user_id, exc)
            raise StorageError("get_profile", str(exc)) from exc

    async def upsert_profile(self, profile: EmergencyProfile) -> UpsertResult:
        """Insert the profile, or overwrite every field of the existing one."""
        try:
            async with self.database.session() as session:
                record = await self._find_profile(session, profile.user_id)
                created = record is None

                if created:
                    record = SosProfileRecord(user_id=profile.user_id)
                    session.add(record)
                elif record.emergency_contacts and not profile.emergency_contacts:
                    logger.warning(
                        "Profile update for %s clears %d existing emergency contact(s)",
                        profile.user_id, len(record.emergency_contacts),
                        extra={"user_id": profile.user_id},
                    )

                record.apply(profile)
        except _STORAGE_FAILURES as exc:
            logger.error("Error saving SOS data for %s: %s", profile.user_id, exc)
            raise StorageError("upsert_profile") from exc

        logger.info(
            "SOS profile %s for %s",
            "created" if created else "updated", profile.user_id,
            extra={"user_id": profile.user_id},
        )
        return UpsertResult(user_id=profile.user_id, created=created)

    @staticmethod
    async def _find_profile(session, user_id: str) -> Optional[SosProfileRecord]:
        result = await session.execute(
            select(SosProfileRecord).where(SosProfileRecord.user_id == user_id)
        )
        return result.scalar_one_or_none()
