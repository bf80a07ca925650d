"""
FastAPI dependency providers.

The app lifespan builds every collaborator once and parks it on
``app.state``; handlers receive them through these providers, which tests
replace with ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends, Request

from backend.lifeline.alerts.alert_service import SosAlertService
from backend.lifeline.core.config import Settings
from backend.lifeline.records.store import RecordStore
from backend.lifeline.services.chat import ChatClient
from backend.lifeline.services.places import PlacesClient
from backend.lifeline.services.sms import SmsClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_places_client(request: Request) -> PlacesClient:
    return request.app.state.places_client


def get_sms_client(request: Request) -> SmsClient:
    return request.app.state.sms_client


def get_chat_client(request: Request) -> ChatClient:
    return request.app.state.chat_client


def get_alert_service(
    store: RecordStore = Depends(get_store),
    sms_client: SmsClient = Depends(get_sms_client),
) -> SosAlertService:
    return SosAlertService(store, sms_client)
