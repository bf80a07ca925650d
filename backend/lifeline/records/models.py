"""
ORM tables.

Ordered sequences (article steps, emergency contacts) live in JSON columns
so every record is written with a single statement.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.lifeline.core.database import Base
from backend.lifeline.records.schemas import EmergencyProfile, FirstAidEntry


class FirstAidRecord(Base):
    __tablename__ = "first_aid"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    steps: Mapped[List[str]] = mapped_column(JSON, default=list)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024))

    def to_entry(self) -> FirstAidEntry:
        return FirstAidEntry(
            title=self.title,
            description=self.description,
            steps=list(self.steps or []),
            image_url=self.image_url,
        )


class SosProfileRecord(Base):
    __tablename__ = "sos_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(64))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    blood_group: Mapped[Optional[str]] = mapped_column(String(16))
    medical_history: Mapped[Optional[str]] = mapped_column(Text)
    emergency_contacts: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)

    def apply(self, profile: EmergencyProfile) -> None:
        """Overwrite every mutable field from ``profile``."""
        self.name = profile.name
        self.phone = profile.phone
        self.email = profile.email
        self.blood_group = profile.blood_group
        self.medical_history = profile.medical_history
        self.emergency_contacts = [
            c.model_dump(mode="json") for c in profile.emergency_contacts
        ]

    def to_profile(self) -> EmergencyProfile:
        return EmergencyProfile(
            user_id=self.user_id,
            name=self.name,
            phone=self.phone,
            email=self.email,
            blood_group=self.blood_group,
            medical_history=self.medical_history,
            emergency_contacts=self.emergency_contacts or [],
        )
