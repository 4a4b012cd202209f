"""Convert Baileys-shaped JSON from the bridge into message and event models."""

from __future__ import annotations

import itertools
from typing import Any, Optional

from wabot.core.types import ConnectionState, ParticipantAction, ParticipantRole
from wabot.log import get_logger
from wabot.messenger.models import (
    AudioPayload,
    ConnectionUpdate,
    ContentDescriptor,
    DocumentPayload,
    GroupMetadata,
    GroupParticipant,
    ImagePayload,
    InboundMessage,
    MessageDeletion,
    ParticipantsUpdate,
    Payload,
    QuotedMessage,
    StickerPayload,
    TextPayload,
    UnsupportedPayload,
    VideoPayload,
)

logger = get_logger(__name__)

# Baileys DisconnectReason.loggedOut
LOGGED_OUT_STATUS = 401
# proto.Message.ProtocolMessage.Type.REVOKE
_REVOKE_TYPES = (0, "REVOKE")

# Containers that wrap the real message content
_WRAPPERS = (
    "ephemeralMessage",
    "viewOnceMessage",
    "viewOnceMessageV2",
    "viewOnceMessageV2Extension",
    "documentWithCaptionMessage",
)
# Metadata keys that sit next to the content key
_IGNORED_KEYS = frozenset({"messageContextInfo", "senderKeyDistributionMessage"})

_sequence = itertools.count(1)


def _unwrap(message: dict[str, Any]) -> dict[str, Any]:
    for wrapper in _WRAPPERS:
        inner = message.get(wrapper)
        if isinstance(inner, dict) and isinstance(inner.get("message"), dict):
            return _unwrap(inner["message"])
    return message


def _descriptor(media: dict[str, Any]) -> ContentDescriptor:
    return ContentDescriptor(
        url=media.get("url", "") or "",
        direct_path=media.get("directPath", "") or "",
        media_key=media.get("mediaKey", "") or "",
        raw=media,
    )


def _context_info(message: dict[str, Any]) -> dict[str, Any]:
    for value in message.values():
        if isinstance(value, dict) and isinstance(value.get("contextInfo"), dict):
            return value["contextInfo"]
    return {}


def parse_payload(message: Optional[dict[str, Any]]) -> Payload:
    """Pick the single content variant out of a ``message`` dict."""
    if not message:
        return UnsupportedPayload(kind="empty")
    message = _unwrap(message)

    if isinstance(message.get("conversation"), str):
        return TextPayload(text=message["conversation"])
    if (ext := message.get("extendedTextMessage")) is not None:
        return TextPayload(text=ext.get("text", "") or "")
    if (media := message.get("imageMessage")) is not None:
        return ImagePayload(
            descriptor=_descriptor(media),
            mimetype=media.get("mimetype", "image/jpeg"),
            caption=media.get("caption", "") or "",
        )
    if (media := message.get("videoMessage")) is not None:
        return VideoPayload(
            descriptor=_descriptor(media),
            mimetype=media.get("mimetype", "video/mp4"),
            caption=media.get("caption", "") or "",
        )
    if (media := message.get("documentMessage")) is not None:
        return DocumentPayload(
            descriptor=_descriptor(media),
            mimetype=media.get("mimetype", "application/octet-stream"),
            file_name=media.get("fileName", "") or "",
        )
    if (media := message.get("audioMessage")) is not None:
        return AudioPayload(
            descriptor=_descriptor(media),
            mimetype=media.get("mimetype", "audio/ogg; codecs=opus"),
            ptt=bool(media.get("ptt", False)),
        )
    if (media := message.get("stickerMessage")) is not None:
        return StickerPayload(
            descriptor=_descriptor(media),
            mimetype=media.get("mimetype", "image/webp"),
        )

    kinds = [k for k in message if k not in _IGNORED_KEYS]
    return UnsupportedPayload(kind=kinds[0] if kinds else "empty")


def parse_message(raw: dict[str, Any]) -> Optional[InboundMessage]:
    """Build an InboundMessage from a WAMessage dict; None if it has no content."""
    key = raw.get("key") or {}
    message = raw.get("message")
    if not message or not key.get("id") or not key.get("remoteJid"):
        return None
    message = _unwrap(message)
    if "protocolMessage" in message:
        return None

    conversation_id = key["remoteJid"]
    context = _context_info(message)
    quoted = None
    if isinstance(context.get("quotedMessage"), dict):
        quoted = QuotedMessage(
            payload=parse_payload(context["quotedMessage"]),
            sender_id=context.get("participant", "") or "",
            conversation_id=context.get("remoteJid", "") or "",
        )

    return InboundMessage(
        id=key["id"],
        conversation_id=conversation_id,
        sender_id=key.get("participant") or conversation_id,
        payload=parse_payload(message),
        from_self=bool(key.get("fromMe", False)),
        received_at=next(_sequence),
        push_name=raw.get("pushName", "") or "",
        quoted=quoted,
        mentions=tuple(context.get("mentionedJid") or ()),
    )


def parse_revocation(raw: dict[str, Any]) -> Optional[MessageDeletion]:
    """Deletions can also arrive as an upserted REVOKE protocol message."""
    message = raw.get("message")
    if not message:
        return None
    protocol = _unwrap(message).get("protocolMessage")
    if not isinstance(protocol, dict) or protocol.get("type") not in _REVOKE_TYPES:
        return None
    revoked = protocol.get("key") or {}
    conversation_id = revoked.get("remoteJid") or (raw.get("key") or {}).get("remoteJid")
    if not revoked.get("id") or not conversation_id:
        return None
    return MessageDeletion(conversation_id=conversation_id, message_id=revoked["id"])


def parse_message_updates(updates: list[dict[str, Any]]) -> list[MessageDeletion]:
    """``messages.update`` entries whose ``update.message`` is null are deletions."""
    deletions: list[MessageDeletion] = []
    for item in updates:
        update = item.get("update")
        key = item.get("key") or {}
        if not isinstance(update, dict) or "message" not in update or update["message"] is not None:
            continue
        if key.get("id") and key.get("remoteJid"):
            deletions.append(MessageDeletion(conversation_id=key["remoteJid"], message_id=key["id"]))
    return deletions


def parse_participants_update(data: dict[str, Any]) -> Optional[ParticipantsUpdate]:
    try:
        action = ParticipantAction(data.get("action", ""))
    except ValueError:
        logger.debug("participants_action_ignored", action=data.get("action"))
        return None
    participants = tuple(
        p["id"] if isinstance(p, dict) else p for p in data.get("participants") or ()
    )
    return ParticipantsUpdate(group_id=data.get("id", ""), participants=participants, action=action)


def parse_connection_update(data: dict[str, Any]) -> ConnectionUpdate:
    state = None
    if data.get("connection"):
        try:
            state = ConnectionState(data["connection"])
        except ValueError:
            logger.debug("connection_state_unknown", connection=data["connection"])
    status_code = data.get("statusCode")
    return ConnectionUpdate(
        state=state,
        qr=data.get("qr"),
        logged_out=status_code == LOGGED_OUT_STATUS or bool(data.get("loggedOut")),
        reason=str(data.get("reason") or status_code or ""),
    )


def parse_group_metadata(data: dict[str, Any]) -> GroupMetadata:
    participants = []
    for p in data.get("participants") or ():
        # Baileys reports admin as "admin" | "superadmin" | null
        try:
            role = ParticipantRole(p.get("admin") or ParticipantRole.MEMBER)
        except ValueError:
            role = ParticipantRole.MEMBER
        participants.append(GroupParticipant(id=p["id"], role=role))
    return GroupMetadata(
        id=data.get("id", ""),
        subject=data.get("subject", "") or "",
        participants=tuple(participants),
        description=data.get("desc", "") or "",
    )
