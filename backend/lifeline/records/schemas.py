"""
Domain types for first-aid articles and emergency profiles.

Field names are snake_case in Python and camelCase on the wire
(``imageUrl``, ``userId``, ``bloodGroup`` ...); both spellings are
accepted on input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FirstAidEntry(CamelModel):
    """Read-only reference article."""
    title: Optional[str] = None
    description: Optional[str] = None
    steps: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None


class EmergencyContact(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None


class EmergencyProfile(CamelModel):
    """One SOS profile per user id."""
    user_id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    blood_group: Optional[str] = None
    medical_history: Optional[str] = None
    emergency_contacts: List[EmergencyContact] = Field(default_factory=list)


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of RecordStore.upsert_profile."""
    user_id: str
    created: bool
