"""
sms.py — SMS delivery channel.

Providers (SMS_PROVIDER):
    • twilio      — POST {TWILIO_BASE_URL}/2010-04-01/Accounts/{sid}/Messages.json
                    form fields To / From / Body, HTTP basic auth (sid, token);
                    the response's ``sid`` is the delivery id
    • simulation  — log the message and return a synthetic id (local dev)

One call sends one message. Any failure raises DeliveryError; retrying and
aggregating across recipients is the caller's concern.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

import httpx

from backend.lifeline.core.config import Settings
from backend.lifeline.core.errors import DeliveryError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("twilio", "simulation")


class SmsClient:
    """Send single text messages through the configured provider."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.provider = settings.SMS_PROVIDER.lower()
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def is_configured(self) -> bool:
        if self.provider == "simulation":
            return True
        return bool(
            self.settings.TWILIO_ACCOUNT_SID
            and self.settings.TWILIO_AUTH_TOKEN
            and self.settings.TWILIO_PHONE_NUMBER
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.settings.SMS_TIMEOUT_SECONDS,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def send(self, body: str, to: Optional[str]) -> str:
        """Send ``body`` to ``to``; return the provider message id."""
        if not to:
            raise DeliveryError("<missing>", "No phone number on file")

        if self.provider == "simulation":
            message_id = f"SIM{uuid.uuid4().hex[:16].upper()}"
            logger.info(
                "[SMS/simulation] → %s (%d chars): %s",
                to, len(body), body[:80] + ("..." if len(body) > 80 else ""),
                extra={"provider": "simulation"},
            )
            return message_id

        if self.provider != "twilio":
            raise DeliveryError(to, f"Unknown SMS provider: {self.provider}")

        if not self.is_configured:
            raise DeliveryError(to, "Twilio credentials are not configured")

        return await self._send_twilio(body, to)

    async def _send_twilio(self, body: str, to: str) -> str:
        sid = self.settings.TWILIO_ACCOUNT_SID
        url = (
            f"{self.settings.TWILIO_BASE_URL.rstrip('/')}"
            f"/2010-04-01/Accounts/{sid}/Messages.json"
        )
        form = {"To": to, "From": self.settings.TWILIO_PHONE_NUMBER, "Body": body}

        try:
            client = await self._get_client()
            response = await client.post(
                url, data=form, auth=(sid, self.settings.TWILIO_AUTH_TOKEN),
            )
            response.raise_for_status()
            message_id = response.json()["sid"]
        except httpx.HTTPStatusError as exc:
            raise DeliveryError(
                to, _twilio_error_message(exc.response),
            ) from exc
        except httpx.HTTPError as exc:
            raise DeliveryError(to, f"{type(exc).__name__}: {exc}") from exc
        except (KeyError, ValueError) as exc:
            raise DeliveryError(to, "Malformed provider response") from exc

        return message_id


def _twilio_error_message(response: httpx.Response) -> str:
    """Twilio error bodies look like {"code": 21211, "message": "..."}."""
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    return payload.get("message") or f"HTTP {response.status_code}"
