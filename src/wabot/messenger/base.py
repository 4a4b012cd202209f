"""Abstract messaging-gateway interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Awaitable, Callable

from wabot.core.types import MediaKind
from wabot.messenger.models import (
    ConnectionUpdate,
    ContentDescriptor,
    GroupMetadata,
    InboundMessage,
    MessageDeletion,
    OutgoingMessage,
    ParticipantsUpdate,
)

MessagesCallback = Callable[[list[InboundMessage]], Awaitable[None]]
DeletionsCallback = Callable[[list[MessageDeletion]], Awaitable[None]]
ParticipantsCallback = Callable[[ParticipantsUpdate], Awaitable[None]]
ConnectionCallback = Callable[[ConnectionUpdate], Awaitable[None]]
CredentialsCallback = Callable[[dict[str, Any]], Awaitable[None]]


class Gateway(ABC):
    """A WhatsApp session: event delivery, outbound sends, group admin and media.

    Subclasses deliver events by awaiting the registered callbacks one batch
    at a time.
    """

    def __init__(self) -> None:
        self._on_messages: MessagesCallback | None = None
        self._on_deletions: DeletionsCallback | None = None
        self._on_participants: ParticipantsCallback | None = None
        self._on_connection: ConnectionCallback | None = None
        self._on_credentials: CredentialsCallback | None = None

    @abstractmethod
    async def start(self) -> None:
        """Connect and begin delivering events."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop delivering events and release the connection."""
        ...

    @abstractmethod
    async def send_message(self, message: OutgoingMessage) -> None:
        ...

    @abstractmethod
    async def group_metadata(self, group_id: str) -> GroupMetadata:
        ...

    @abstractmethod
    async def group_update_subject(self, group_id: str, subject: str) -> None:
        ...

    @abstractmethod
    async def group_update_description(self, group_id: str, description: str) -> None:
        ...

    @abstractmethod
    async def group_participants_remove(self, group_id: str, participants: list[str]) -> None:
        ...

    @abstractmethod
    def download_content(self, descriptor: ContentDescriptor, kind: MediaKind) -> AsyncIterator[bytes]:
        """Stream the media behind ``descriptor``. The stream can be consumed once."""
        ...

    def on_messages(self, callback: MessagesCallback) -> None:
        self._on_messages = callback

    def on_deletions(self, callback: DeletionsCallback) -> None:
        self._on_deletions = callback

    def on_participants(self, callback: ParticipantsCallback) -> None:
        self._on_participants = callback

    def on_connection(self, callback: ConnectionCallback) -> None:
        self._on_connection = callback

    def on_credentials(self, callback: CredentialsCallback) -> None:
        self._on_credentials = callback
