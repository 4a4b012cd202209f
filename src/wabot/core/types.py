"""Shared types and enumerations."""

from __future__ import annotations

from enum import StrEnum


class MediaKind(StrEnum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"
    STICKER = "sticker"


class ParticipantRole(StrEnum):
    MEMBER = "member"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class ParticipantAction(StrEnum):
    ADD = "add"
    REMOVE = "remove"
    PROMOTE = "promote"
    DEMOTE = "demote"


class ConnectionState(StrEnum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSE = "close"


class AuthLevel(StrEnum):
    OPEN = "open"
    OWNER = "owner"
    GROUP_ADMIN = "group_admin"


GROUP_SUFFIX = "@g.us"
USER_SUFFIX = "@s.whatsapp.net"
STATUS_BROADCAST = "status@broadcast"
