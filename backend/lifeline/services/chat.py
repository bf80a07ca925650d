"""
chat.py — medical-advisor chat backed by the Gemini generateContent API.

The service keeps no conversation state: the caller restates the prior
turns on every request and they are folded into one prompt:

    <SYSTEM_PROMPT>

    CONVERSATION HISTORY:
    Human: ...
    Assistant: ...

    CURRENT CONVERSATION:
    Human: <message>
    Assistant:

The history block is omitted when there are no prior turns. The reply is
the text of the first candidate, returned verbatim.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Literal, Optional

import httpx
from pydantic import BaseModel

from backend.lifeline.core.config import Settings
from backend.lifeline.core.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Gemini API"
FAILURE_MESSAGE = "Sorry, I couldn't process your request. Please try again."

SYSTEM_PROMPT = """
You are MedAI, a professional medical advisor AI.
Keep responses short and concise, about 50 words.
Provide accurate medical advice for emergencies or general queries.
Prioritize safety, recommend professional help when needed, avoid diagnoses.
Offer step-by-step first aid, explain symptoms, suggest emergency care.
Redirect non-medical queries to professionals.
"""

ROLE_LABELS = {"user": "Human", "bot": "Assistant"}


class ChatTurn(BaseModel):
    """One prior message, as supplied by the caller."""
    sender: Literal["user", "bot"]
    text: str


def render_history(history: Optional[Iterable[ChatTurn]]) -> str:
    turns = list(history or [])
    if not turns:
        return ""

    lines = ["CONVERSATION HISTORY:"]
    lines.extend(f"{ROLE_LABELS[turn.sender]}: {turn.text}" for turn in turns)
    return "\n".join(lines) + "\n\nCURRENT CONVERSATION:\n"


def build_prompt(message: str, history: Optional[Iterable[ChatTurn]] = None) -> str:
    return f"{SYSTEM_PROMPT}\n\n{render_history(history)}Human: {message}\nAssistant:"


class ChatClient:
    """Single-shot text generation with caller-supplied context."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.settings.HTTP_TIMEOUT_SECONDS,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    def _request_body(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.settings.GEMINI_TEMPERATURE,
                "topK": self.settings.GEMINI_TOP_K,
                "topP": self.settings.GEMINI_TOP_P,
                "maxOutputTokens": self.settings.GEMINI_MAX_OUTPUT_TOKENS,
            },
        }

    async def reply(self, message: str, history: Optional[Iterable[ChatTurn]] = None) -> str:
        api_key = self.settings.GEMINI_API_KEY
        if not api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY", "Gemini API key is not configured",
            )

        prompt = build_prompt(message, history)
        logger.debug("Sending to Gemini: %s", prompt)

        url = (
            f"{self.settings.GEMINI_BASE_URL.rstrip('/')}"
            f"/models/{self.settings.GEMINI_MODEL}:generateContent"
        )

        try:
            client = await self._get_client()
            response = await client.post(
                url, params={"key": api_key}, json=self._request_body(prompt),
            )
            response.raise_for_status()
            data = response.json()
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except httpx.HTTPError as exc:
            logger.error(
                "Error fetching response from Gemini API: %s", exc,
                extra={"provider": "gemini"},
            )
            raise UpstreamError(SERVICE_NAME, FAILURE_MESSAGE, status_code=500) from exc
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error(
                "Unexpected Gemini response shape: %r", exc,
                extra={"provider": "gemini"},
            )
            raise UpstreamError(SERVICE_NAME, FAILURE_MESSAGE, status_code=500) from exc
