"""Subscribes the cache, router and group announcer to gateway events."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Any

from wabot import texts
from wabot.commands.router import CommandRouter
from wabot.core.cache import DeletedMessageCache
from wabot.core.types import ConnectionState, ParticipantAction
from wabot.log import get_logger
from wabot.messenger.base import Gateway
from wabot.messenger.models import (
    ConnectionUpdate,
    InboundMessage,
    MessageDeletion,
    OutgoingMessage,
    ParticipantsUpdate,
)

logger = get_logger(__name__)

_ANNOUNCEMENTS = {
    ParticipantAction.ADD: texts.WELCOME,
    ParticipantAction.REMOVE: texts.GOODBYE,
    ParticipantAction.PROMOTE: texts.PROMOTED,
    ParticipantAction.DEMOTE: texts.DEMOTED,
}


def announcement_text(action: ParticipantAction, participant: str, subject: str = "") -> str:
    user = participant.split("@")[0]
    return _ANNOUNCEMENTS[action].format(
        user=user, subject=subject or texts.WELCOME_FALLBACK_SUBJECT
    )


class EventWiring:
    """Connects gateway callbacks to the bot's components.

    ``reconnect`` is set on a recoverable disconnect; ``logged_out`` is set
    when the session was revoked and the bot must be paired again.
    """

    def __init__(
        self,
        gateway: Gateway,
        cache: DeletedMessageCache,
        router: CommandRouter,
        auth_dir: str | Path,
    ):
        self._gateway = gateway
        self._cache = cache
        self._router = router
        self._auth_dir = Path(auth_dir)
        self.reconnect = asyncio.Event()
        self.logged_out = asyncio.Event()

    def attach(self) -> None:
        self._gateway.on_messages(self.handle_messages)
        self._gateway.on_deletions(self.handle_deletions)
        self._gateway.on_participants(self.handle_participants)
        self._gateway.on_connection(self.handle_connection)
        self._gateway.on_credentials(self.handle_credentials)

    async def handle_messages(self, messages: list[InboundMessage]) -> None:
        for message in messages:
            # Cache first so a deletion arriving mid-command can still resolve it
            if not message.from_self:
                self._cache.put(message.id, message)
            await self._router.dispatch(message)

    async def handle_deletions(self, deletions: list[MessageDeletion]) -> None:
        for deletion in deletions:
            self._cache.record_deletion(deletion.conversation_id, deletion.message_id)

    async def handle_participants(self, update: ParticipantsUpdate) -> None:
        subject = ""
        if update.action == ParticipantAction.ADD:
            try:
                subject = (await self._gateway.group_metadata(update.group_id)).subject
            except Exception as e:
                logger.warning("group_metadata_unavailable", group_id=update.group_id, error=str(e))

        for participant in update.participants:
            text = announcement_text(update.action, participant, subject)
            try:
                await self._gateway.send_message(
                    OutgoingMessage(chat_id=update.group_id, text=text, mentions=(participant,))
                )
            except Exception as e:
                logger.error(
                    "announcement_failed",
                    group_id=update.group_id,
                    action=str(update.action),
                    error=str(e),
                )

    async def handle_connection(self, update: ConnectionUpdate) -> None:
        if update.qr:
            logger.info("pairing_qr_received", hint="scan the QR shown by the bridge", qr=update.qr)
        if update.state == ConnectionState.OPEN:
            logger.info("connection_open")
        elif update.state == ConnectionState.CLOSE:
            if update.logged_out:
                logger.error("session_logged_out", reason=update.reason)
                shutil.rmtree(self._auth_dir, ignore_errors=True)
                self.logged_out.set()
            else:
                logger.warning("connection_closed_reconnecting", reason=update.reason)
                self.reconnect.set()

    async def handle_credentials(self, creds: dict[str, Any]) -> None:
        # The bridge persists credentials itself; only note that they changed.
        logger.debug("credentials_updated", keys=sorted(creds))
