"""
FastAPI route: medical-advisor chat.

    POST /api/chat  {message, chatHistory?}  → {reply}
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backend.lifeline.api.dependencies import get_chat_client
from backend.lifeline.core.errors import InvalidArgumentError
from backend.lifeline.records.schemas import CamelModel
from backend.lifeline.services.chat import ChatClient, ChatTurn

router = APIRouter(prefix="/api", tags=["chat"])


class ChatRequest(CamelModel):
    message: Optional[str] = Field(None, examples=["What should I do for a burn?"])
    chat_history: Optional[List[ChatTurn]] = Field(
        None, description="Prior turns, oldest first",
    )


class ChatResponse(BaseModel):
    reply: str


@router.post("/chat", response_model=ChatResponse, summary="Ask the medical advisor")
async def chat(request: ChatRequest, client: ChatClient = Depends(get_chat_client)):
    if not request.message:
        raise InvalidArgumentError("Message is required", field="message")

    reply = await client.reply(request.message, request.chat_history)
    return ChatResponse(reply=reply)
