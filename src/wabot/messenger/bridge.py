"""Gateway implementation backed by a local Baileys bridge process over HTTP.

The bridge owns the WhatsApp socket, QR pairing and credential files. This
adapter long-polls ``/events`` and hands each batch to the registered
callbacks before polling again, so batches are processed one at a time.
"""

from __future__ import annotations

import asyncio
import base64
from typing import Any, AsyncIterator

import httpx

from wabot.config import GatewayConfig
from wabot.core.types import ConnectionState, MediaKind
from wabot.log import get_logger
from wabot.messenger.base import Gateway
from wabot.messenger.models import ConnectionUpdate, ContentDescriptor, GroupMetadata, OutgoingMessage
from wabot.messenger.parse import (
    parse_connection_update,
    parse_group_metadata,
    parse_message,
    parse_message_updates,
    parse_participants_update,
    parse_revocation,
)

logger = get_logger(__name__)

_HEALTH_ATTEMPTS = 15
_POLL_ERROR_BACKOFF = 5


def _encode(data: bytes | None) -> str | None:
    return base64.b64encode(data).decode("ascii") if data is not None else None


def outgoing_to_json(message: OutgoingMessage) -> dict[str, Any]:
    """Serialize an OutgoingMessage into the bridge's ``/send`` body."""
    content: dict[str, Any] = {}
    match message.content_kind:
        case "text":
            content["text"] = message.text
        case "video_url":
            content["video"] = {"url": message.video_url}
        case kind:
            content[kind] = {"base64": _encode(getattr(message, kind))}
    if message.caption:
        content["caption"] = message.caption
    if message.mimetype:
        content["mimetype"] = message.mimetype
    if message.file_name:
        content["fileName"] = message.file_name
    if message.audio is not None:
        content["ptt"] = message.ptt
    if message.mentions:
        content["mentions"] = list(message.mentions)
    return {"chatId": message.chat_id, "content": content}


class BridgeGateway(Gateway):
    """WhatsApp gateway talking to the Baileys bridge's HTTP API."""

    def __init__(self, config: GatewayConfig, client: httpx.AsyncClient | None = None):
        super().__init__()
        self._config = config
        self._client = client
        self._owns_client = client is None
        self._task: asyncio.Task[None] | None = None
        self._running = False

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.bridge_url,
                timeout=httpx.Timeout(self._config.request_timeout),
            )
        await self._wait_until_ready()
        self._running = True
        self._task = asyncio.create_task(self._poll_events())
        logger.info("bridge_gateway_started", bridge_url=self._config.bridge_url)

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        logger.info("bridge_gateway_stopped")

    async def _wait_until_ready(self) -> None:
        assert self._client is not None
        for attempt in range(1, _HEALTH_ATTEMPTS + 1):
            try:
                resp = await self._client.get("/health", timeout=2)
                if resp.status_code == 200:
                    logger.info("bridge_ready", status=resp.json().get("status", "?"))
                    return
            except httpx.HTTPError as e:
                logger.debug("bridge_not_ready", attempt=attempt, error=str(e))
            await asyncio.sleep(1)
        raise ConnectionError(f"Bridge at {self._config.bridge_url} did not become ready")

    async def _poll_events(self) -> None:
        """Run the poll loop; if it dies, report a closed connection so the session restarts."""
        try:
            await self._poll_loop()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("bridge_poll_crashed", error=str(e), exc_info=True)
            if self._on_connection:
                await self._on_connection(
                    ConnectionUpdate(state=ConnectionState.CLOSE, reason="event poll failed")
                )

    async def _poll_loop(self) -> None:
        client = self._require_client()
        while self._running:
            try:
                resp = await client.get(
                    "/events",
                    params={"timeout": self._config.poll_timeout},
                    timeout=self._config.poll_timeout + 10,
                )
                resp.raise_for_status()
                events = resp.json()
            except asyncio.CancelledError:
                raise
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("bridge_poll_error", error=str(e))
                await asyncio.sleep(_POLL_ERROR_BACKOFF)
                continue

            if not isinstance(events, list):
                logger.warning("bridge_poll_bad_body", body_type=type(events).__name__)
                await asyncio.sleep(_POLL_ERROR_BACKOFF)
                continue
            for event in events:
                await self.dispatch_event(event)

    async def dispatch_event(self, event: dict[str, Any]) -> None:
        """Route one bridge event to the matching callback."""
        if not isinstance(event, dict):
            logger.warning("bridge_event_malformed", event_type=type(event).__name__)
            return
        event_type = event.get("type", "")
        try:
            match event_type:
                case "messages.upsert":
                    await self._dispatch_upsert(event.get("messages") or [])
                case "messages.update":
                    deletions = parse_message_updates(event.get("updates") or [])
                    if deletions and self._on_deletions:
                        await self._on_deletions(deletions)
                case "group-participants.update":
                    update = parse_participants_update(event)
                    if update and self._on_participants:
                        await self._on_participants(update)
                case "connection.update":
                    if self._on_connection:
                        await self._on_connection(parse_connection_update(event))
                case "creds.update":
                    if self._on_credentials:
                        await self._on_credentials(event.get("creds") or {})
                case _:
                    logger.debug("bridge_event_ignored", event_type=event_type)
        except Exception as e:
            logger.error("bridge_event_handler_error", event_type=event_type, error=str(e), exc_info=True)

    async def _dispatch_upsert(self, raw_messages: list[dict[str, Any]]) -> None:
        messages = []
        revocations = []
        for raw in raw_messages:
            if (revoked := parse_revocation(raw)) is not None:
                revocations.append(revoked)
            elif (message := parse_message(raw)) is not None:
                messages.append(message)
        if revocations and self._on_deletions:
            await self._on_deletions(revocations)
        if messages and self._on_messages:
            await self._on_messages(messages)

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise ConnectionError("Bridge gateway is not started")
        return self._client

    async def send_message(self, message: OutgoingMessage) -> None:
        resp = await self._require_client().post("/send", json=outgoing_to_json(message))
        resp.raise_for_status()
        logger.debug("message_sent", chat_id=message.chat_id, kind=message.content_kind)

    async def group_metadata(self, group_id: str) -> GroupMetadata:
        resp = await self._require_client().get(f"/groups/{group_id}")
        resp.raise_for_status()
        return parse_group_metadata(resp.json())

    async def group_update_subject(self, group_id: str, subject: str) -> None:
        resp = await self._require_client().post(f"/groups/{group_id}/subject", json={"subject": subject})
        resp.raise_for_status()

    async def group_update_description(self, group_id: str, description: str) -> None:
        resp = await self._require_client().post(
            f"/groups/{group_id}/description", json={"description": description}
        )
        resp.raise_for_status()

    async def group_participants_remove(self, group_id: str, participants: list[str]) -> None:
        resp = await self._require_client().post(
            f"/groups/{group_id}/participants",
            json={"participants": participants, "action": "remove"},
        )
        resp.raise_for_status()

    async def download_content(self, descriptor: ContentDescriptor, kind: MediaKind) -> AsyncIterator[bytes]:
        body = {"type": str(kind), "media": descriptor.raw or {
            "url": descriptor.url,
            "directPath": descriptor.direct_path,
            "mediaKey": descriptor.media_key,
        }}
        async with self._require_client().stream("POST", "/media", json=body) as resp:
            resp.raise_for_status()
            async for chunk in resp.aiter_bytes():
                yield chunk
