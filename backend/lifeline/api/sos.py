"""
FastAPI route: emergency (SOS) profiles and alert triggering.

Provides endpoints to:
    POST /api/sos            — create or fully overwrite a user's profile
    GET  /api/sos/{userId}   — fetch a profile
    POST /api/sos/alert      — SMS every emergency contact of a profile
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backend.lifeline.alerts.alert_service import NOT_FOUND_MESSAGE, SosAlertService
from backend.lifeline.api.dependencies import get_alert_service, get_store
from backend.lifeline.core.errors import InvalidArgumentError, NotFoundError
from backend.lifeline.records.schemas import (
    CamelModel,
    EmergencyContact,
    EmergencyProfile,
)
from backend.lifeline.records.store import RecordStore

router = APIRouter(prefix="/api/sos", tags=["sos"])

ALERT_SENT_MESSAGE = "🚨 SOS Alert Sent Successfully!"


# ---------------------------------------------------------------------------
# Request / Response Schemas
# ---------------------------------------------------------------------------

class ProfileSubmission(CamelModel):
    """Full profile as submitted by the client. Omitted fields are stored empty."""
    user_id: Optional[str] = Field(None, examples=["user-123"])
    name: Optional[str] = Field(None, examples=["Asha Rao"])
    phone: Optional[str] = Field(None, examples=["+919876543210"])
    email: Optional[str] = None
    blood_group: Optional[str] = Field(None, examples=["O+"])
    medical_history: Optional[str] = None
    emergency_contacts: Optional[List[EmergencyContact]] = None


class AlertRequest(CamelModel):
    user_id: Optional[str] = Field(None, examples=["user-123"])


class MessageResponse(BaseModel):
    message: str


class AlertResponse(CamelModel):
    message: str
    user_id: str
    total: int
    delivered: int
    failed: int
    started_at: str
    completed_at: Optional[str] = None
    deliveries: List[Dict[str, Any]]


def _require_user_id(user_id: Optional[str]) -> str:
    if not user_id:
        raise InvalidArgumentError("User ID is required", field="userId")
    return user_id


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=MessageResponse, summary="Save emergency info")
async def save_profile(
    submission: ProfileSubmission,
    store: RecordStore = Depends(get_store),
):
    user_id = _require_user_id(submission.user_id)
    profile = EmergencyProfile(
        user_id=user_id,
        name=submission.name,
        phone=submission.phone,
        email=submission.email,
        blood_group=submission.blood_group,
        medical_history=submission.medical_history,
        emergency_contacts=submission.emergency_contacts or [],
    )

    result = await store.upsert_profile(profile)
    if result.created:
        return MessageResponse(message="Emergency info saved!")
    return MessageResponse(message="Emergency info updated!")


@router.post(
    "/alert",
    response_model=AlertResponse,
    summary="Alert all emergency contacts",
    description=(
        "Sends one SMS per emergency contact concurrently and responds once "
        "every send has finished. Individual send failures are reported in "
        "`deliveries` and do not fail the request."
    ),
)
async def trigger_alert(
    request: AlertRequest,
    alerts: SosAlertService = Depends(get_alert_service),
):
    user_id = _require_user_id(request.user_id)
    report = await alerts.trigger(user_id)
    return AlertResponse(message=ALERT_SENT_MESSAGE, **report.to_dict())


@router.get("/{user_id}", response_model=EmergencyProfile, summary="Get emergency info")
async def get_profile(user_id: str, store: RecordStore = Depends(get_store)):
    profile = await store.get_profile(user_id)
    if profile is None:
        raise NotFoundError(NOT_FOUND_MESSAGE, user_id=user_id)
    return profile
