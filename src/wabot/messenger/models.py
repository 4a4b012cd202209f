"""Message, group and event models shared by the gateway and the command router."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from wabot.core.types import (
    GROUP_SUFFIX,
    STATUS_BROADCAST,
    ConnectionState,
    MediaKind,
    ParticipantAction,
    ParticipantRole,
)


@dataclass(frozen=True, slots=True)
class ContentDescriptor:
    """Gateway reference to downloadable media. Each download consumes one stream."""

    url: str = ""
    direct_path: str = ""
    media_key: str = ""
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True, slots=True)
class TextPayload:
    text: str


@dataclass(frozen=True, slots=True)
class ImagePayload:
    descriptor: ContentDescriptor
    mimetype: str = "image/jpeg"
    caption: str = ""
    kind = MediaKind.IMAGE


@dataclass(frozen=True, slots=True)
class VideoPayload:
    descriptor: ContentDescriptor
    mimetype: str = "video/mp4"
    caption: str = ""
    kind = MediaKind.VIDEO


@dataclass(frozen=True, slots=True)
class DocumentPayload:
    descriptor: ContentDescriptor
    mimetype: str = "application/octet-stream"
    file_name: str = ""
    kind = MediaKind.DOCUMENT


@dataclass(frozen=True, slots=True)
class AudioPayload:
    descriptor: ContentDescriptor
    mimetype: str = "audio/ogg; codecs=opus"
    ptt: bool = False
    kind = MediaKind.AUDIO


@dataclass(frozen=True, slots=True)
class StickerPayload:
    descriptor: ContentDescriptor
    mimetype: str = "image/webp"
    kind = MediaKind.STICKER


@dataclass(frozen=True, slots=True)
class UnsupportedPayload:
    """A message type the bot does not model (location, contact, poll, ...)."""

    kind: str


Payload = Union[
    TextPayload,
    ImagePayload,
    VideoPayload,
    DocumentPayload,
    AudioPayload,
    StickerPayload,
    UnsupportedPayload,
]
MediaPayload = Union[ImagePayload, VideoPayload, DocumentPayload, AudioPayload, StickerPayload]


@dataclass(frozen=True, slots=True)
class QuotedMessage:
    """The message an inbound message replies to."""

    payload: Payload
    sender_id: str = ""
    conversation_id: str = ""

    @property
    def is_status(self) -> bool:
        return self.conversation_id == STATUS_BROADCAST


@dataclass(frozen=True, slots=True)
class InboundMessage:
    id: str
    conversation_id: str
    sender_id: str
    payload: Payload
    from_self: bool = False
    received_at: int = 0
    push_name: str = ""
    quoted: Optional[QuotedMessage] = None
    mentions: tuple[str, ...] = ()

    @property
    def is_group(self) -> bool:
        return self.conversation_id.endswith(GROUP_SUFFIX)

    @property
    def text_surface(self) -> str:
        """Text body, else media caption, else document file name."""
        match self.payload:
            case TextPayload(text=text):
                return text
            case ImagePayload(caption=caption) | VideoPayload(caption=caption):
                return caption
            case DocumentPayload(file_name=file_name):
                return file_name
            case _:
                return ""

    @property
    def display_name(self) -> str:
        return self.push_name or self.sender_id or self.conversation_id.split("@")[0]


@dataclass(frozen=True, slots=True)
class OutgoingMessage:
    """A single outbound message. Exactly one content field is set."""

    chat_id: str
    text: Optional[str] = None
    image: Optional[bytes] = None
    video: Optional[bytes] = None
    video_url: Optional[str] = None
    audio: Optional[bytes] = None
    document: Optional[bytes] = None
    sticker: Optional[bytes] = None
    caption: str = ""
    mimetype: str = ""
    file_name: str = ""
    ptt: bool = False
    mentions: tuple[str, ...] = ()

    @property
    def content_kind(self) -> str:
        for name in ("text", "image", "video", "video_url", "audio", "document", "sticker"):
            if getattr(self, name) is not None:
                return name
        raise ValueError("OutgoingMessage has no content")


@dataclass(frozen=True, slots=True)
class GroupParticipant:
    id: str
    role: ParticipantRole = ParticipantRole.MEMBER


@dataclass(frozen=True, slots=True)
class GroupMetadata:
    id: str
    subject: str
    participants: tuple[GroupParticipant, ...] = ()
    description: str = ""


@dataclass(frozen=True, slots=True)
class ConnectionUpdate:
    state: Optional[ConnectionState] = None
    qr: Optional[str] = None
    logged_out: bool = False
    reason: str = ""


@dataclass(frozen=True, slots=True)
class ParticipantsUpdate:
    group_id: str
    participants: tuple[str, ...]
    action: ParticipantAction


@dataclass(frozen=True, slots=True)
class MessageDeletion:
    conversation_id: str
    message_id: str
