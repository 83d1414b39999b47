"""
Outbound notification channels.

The Gmail and WhatsApp satellites are small Node services that render and
deliver appointment messages. Real-time pushes go through Redis pub/sub and
are relayed to connected staff browsers by the frontend gateway.

All channel objects are owned by a single NotificationChannels instance that
is started and closed explicitly (FastAPI lifespan, arq worker startup).
"""

import json
import logging
from typing import Any, Optional

import httpx
import redis.asyncio as aioredis

from ... import config

logger = logging.getLogger(__name__)


class SatelliteClient:
    """Thin httpx wrapper around one satellite service"""

    name = "satellite"

    def __init__(
        self,
        base_url: str,
        timeout: float,
        headers: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_started(self) -> bool:
        return self._client is not None

    async def start(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self.headers,
            transport=self._transport,
        )
        logger.info(f"🔌 {self.name} client ready ({self.base_url})")

    async def close(self) -> None:
        if self._client is None:
            return
        await self._client.aclose()
        self._client = None
        logger.info(f"🔌 {self.name} client closed")

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(f"{self.name} client is not started")
        return self._client

    async def _post(self, path: str, payload: dict[str, Any]) -> bool:
        """POST a JSON payload. Returns True on any 2xx response."""
        client = self._require_client()
        try:
            response = await client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"❌ {self.name} request to {path} failed: {e}")
            return False

        if response.is_success:
            logger.info(f"📡 {self.name} {path} -> {response.status_code}")
            return True

        logger.error(f"❌ {self.name} {path} returned {response.status_code}: {response.text[:200]}")
        return False


class GmailApiClient(SatelliteClient):
    name = "Gmail API"

    async def send_appointment_confirmation(self, email: str, data: dict) -> bool:
        return await self._post("/gmail/appointment-confirmation", {"email": email, "data": data})

    async def send_appointment_reminder(self, email: str, data: dict) -> bool:
        return await self._post("/gmail/appointment-reminder", {"email": email, "data": data})

    async def send_appointment_cancellation(self, email: str, data: dict) -> bool:
        return await self._post("/gmail/appointment-cancellation", {"email": email, "data": data})


class WhatsAppApiClient(SatelliteClient):
    name = "WhatsApp API"

    async def send_appointment_confirmation(self, phone_number: str, data: dict) -> bool:
        return await self._post("/whatsapp/appointment-confirmation", {"phoneNumber": phone_number, "data": data})

    async def send_appointment_reminder(self, phone_number: str, data: dict) -> bool:
        return await self._post("/whatsapp/appointment-reminder", {"phoneNumber": phone_number, "data": data})

    async def send_appointment_cancellation(self, phone_number: str, data: dict) -> bool:
        return await self._post("/whatsapp/appointment-cancellation", {"phoneNumber": phone_number, "data": data})

    async def send_appointment_completed(self, phone_number: str, data: dict) -> bool:
        return await self._post("/whatsapp/appointment-completed", {"phoneNumber": phone_number, "data": data})

    async def is_ready(self) -> bool:
        """Ask the satellite whether its WhatsApp session is connected"""
        client = self._require_client()
        try:
            response = await client.get("/whatsapp/status")
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ WhatsApp status check failed: {e}")
            return False

        if not response.is_success:
            return False
        try:
            body = response.json()
        except ValueError:
            return True
        if isinstance(body, dict):
            for key in ("ready", "isReady", "connected"):
                if key in body:
                    return bool(body[key])
        return True


class RealtimePublisher:
    """Publishes staff events on Redis channels notifications:user:<id>"""

    def __init__(self, redis_url: Optional[str]):
        self.redis_url = redis_url
        self._redis = None

    async def start(self) -> None:
        if not self.redis_url or self._redis is not None:
            return
        self._redis = aioredis.from_url(self.redis_url, decode_responses=True)
        logger.info("🔌 Real-time publisher ready")

    async def close(self) -> None:
        if self._redis is None:
            return
        await self._redis.aclose()
        self._redis = None

    @staticmethod
    def channel_for_user(user_id: int) -> str:
        return f"notifications:user:{user_id}"

    async def publish_to_user(self, user_id: int, event: str, payload: dict) -> bool:
        if self._redis is None:
            logger.debug(f"Real-time publisher not configured, skipping {event} for user {user_id}")
            return False
        message = json.dumps({"event": event, "data": payload}, default=str)
        await self._redis.publish(self.channel_for_user(user_id), message)
        return True


class NotificationChannels:
    """Lifecycle owner for every outbound channel"""

    def __init__(
        self,
        gmail: Optional[GmailApiClient] = None,
        whatsapp: Optional[WhatsAppApiClient] = None,
        realtime: Optional[RealtimePublisher] = None,
    ):
        self.gmail = gmail or GmailApiClient(config.GMAIL_API_URL, config.GMAIL_API_TIMEOUT)
        whatsapp_headers = {"X-API-Key": config.WHATSAPP_API_KEY} if config.WHATSAPP_API_KEY else None
        self.whatsapp = whatsapp or WhatsAppApiClient(
            config.WHATSAPP_API_URL, config.WHATSAPP_API_TIMEOUT, headers=whatsapp_headers
        )
        self.realtime = realtime or RealtimePublisher(config.REDIS_URL)

    async def start(self) -> None:
        await self.gmail.start()
        await self.whatsapp.start()
        await self.realtime.start()

    async def close(self) -> None:
        await self.gmail.close()
        await self.whatsapp.close()
        await self.realtime.close()

    async def whatsapp_ready(self) -> bool:
        if not self.whatsapp.is_started:
            return False
        return await self.whatsapp.is_ready()
