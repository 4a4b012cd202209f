"""Bounded cache of inbound messages for deleted-message recovery.

Deletion notifications carry only the conversation and message id, so the
original content can be restored only if it was cached when it arrived.
Entries are evicted oldest-inserted first; lookups never keep an entry
alive. A deletion whose message was already evicted (or never seen) is
silently unrecoverable, and ``get_last_deleted`` cannot tell those cases
apart.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Optional

from wabot.log import get_logger
from wabot.messenger.models import InboundMessage

logger = get_logger(__name__)

DEFAULT_MAX_ENTRIES = 1000
LAST_DELETED_SUFFIX = ":lastDeleted"


def last_deleted_key(conversation_id: str) -> str:
    return f"{conversation_id}{LAST_DELETED_SUFFIX}"


class DeletedMessageCache:
    """Message id -> inbound message, plus one last-deleted slot per conversation."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._messages: OrderedDict[str, InboundMessage] = OrderedDict()
        self._last_deleted: dict[str, InboundMessage] = {}

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._messages

    def put(self, message_id: str, record: InboundMessage) -> None:
        """Insert or overwrite; an overwrite counts as the newest insertion."""
        if message_id in self._messages:
            self._messages.move_to_end(message_id)
        self._messages[message_id] = record
        while len(self._messages) > self._max_entries:
            evicted, _ = self._messages.popitem(last=False)
            logger.debug("cache_evicted", message_id=evicted)

    def get(self, message_id: str) -> Optional[InboundMessage]:
        return self._messages.get(message_id)

    def record_deletion(self, conversation_id: str, message_id: str) -> bool:
        """Remember the deleted message for ``conversation_id`` if it is still cached."""
        original = self._messages.get(message_id)
        if original is None:
            logger.debug(
                "deletion_unrecoverable",
                conversation_id=conversation_id,
                message_id=message_id,
            )
            return False
        self._last_deleted[last_deleted_key(conversation_id)] = original
        logger.info(
            "deletion_recorded",
            conversation_id=conversation_id,
            message_id=message_id,
        )
        return True

    def get_last_deleted(self, conversation_id: str) -> Optional[InboundMessage]:
        return self._last_deleted.get(last_deleted_key(conversation_id))
