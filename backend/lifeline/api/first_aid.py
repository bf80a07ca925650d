"""
FastAPI route: first-aid reference articles.

    GET /api/first-aid  — every article
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from backend.lifeline.api.dependencies import get_store
from backend.lifeline.records.schemas import FirstAidEntry
from backend.lifeline.records.store import RecordStore

router = APIRouter(prefix="/api", tags=["first-aid"])


@router.get("/first-aid", response_model=List[FirstAidEntry], summary="List first-aid articles")
async def list_first_aid(store: RecordStore = Depends(get_store)):
    return await store.list_first_aid()
