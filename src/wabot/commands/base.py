"""Command parsing, per-invocation context and handler descriptors."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from wabot.core.errors import DeliveryError
from wabot.core.types import AuthLevel
from wabot.messenger.models import GroupMetadata, InboundMessage, OutgoingMessage

if TYPE_CHECKING:
    from wabot.ai.client import AIClient
    from wabot.config import AppConfig
    from wabot.core.cache import DeletedMessageCache
    from wabot.media.pipeline import MediaPipeline
    from wabot.messenger.base import Gateway
    from wabot.services.tiktok import TikTokDownloader


@dataclass(frozen=True, slots=True)
class ParsedCommand:
    command: str  # lower-cased, without the trigger
    argument: str


def parse_command(text: str, trigger: str = ".") -> Optional[ParsedCommand]:
    """Split ``text`` into a command token and its argument.

    The first whitespace-delimited token must start with ``trigger``; it is
    matched case-insensitively. The argument is the rest of the text with
    that one token removed and surrounding whitespace trimmed.
    """
    stripped = text.strip()
    if not stripped.startswith(trigger):
        return None
    parts = stripped.split(maxsplit=1)
    token = parts[0][len(trigger):].lower()
    if not token:
        return None
    argument = parts[1].strip() if len(parts) > 1 else ""
    return ParsedCommand(command=token, argument=argument)


@dataclass
class BotServices:
    """Long-lived collaborators shared by every command invocation."""

    gateway: Gateway
    config: AppConfig
    cache: DeletedMessageCache
    pipeline: MediaPipeline
    ai: AIClient
    tiktok: TikTokDownloader
    started_at: float = field(default_factory=time.monotonic)
    started_wall: datetime = field(default_factory=datetime.now)


@dataclass
class CommandContext:
    """Everything one handler invocation needs. Discarded after the reply."""

    message: InboundMessage
    command: str
    argument: str
    services: BotServices
    group: Optional[GroupMetadata] = None

    @property
    def chat_id(self) -> str:
        return self.message.conversation_id

    async def send(self, message: OutgoingMessage, failure_text: str = "") -> None:
        """Send through the gateway; with ``failure_text``, a failed send becomes a DeliveryError."""
        if not failure_text:
            await self.services.gateway.send_message(message)
            return
        try:
            await self.services.gateway.send_message(message)
        except Exception as e:
            raise DeliveryError(failure_text, detail=str(e)) from e

    async def reply(self, text: str, mentions: tuple[str, ...] = ()) -> None:
        await self.send(OutgoingMessage(chat_id=self.chat_id, text=text, mentions=mentions))


CommandHandler = Callable[[CommandContext], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Dispatch-table entry: who may run a command and what runs."""

    name: str
    handler: CommandHandler
    auth: AuthLevel = AuthLevel.OPEN
    aliases: tuple[str, ...] = ()
    # Reply when the sender lacks the required role
    denied_text: str = ""
    # Reply for unexpected failures inside the handler
    failure_text: str = ""
