"""Owner and group-admin checks.

Both predicates are evaluated per command against fresh data; group roles
are never cached, so a demoted admin loses access on their next command.
"""

from __future__ import annotations

import re
from typing import Iterable

from wabot.core.types import USER_SUFFIX, ParticipantRole
from wabot.messenger.models import GroupParticipant

_NON_DIGITS = re.compile(r"[^0-9]")
_ADMIN_ROLES = frozenset({ParticipantRole.ADMIN, ParticipantRole.SUPERADMIN})


def normalize_number(jid: str) -> str:
    """Strip everything but digits (``628123@s.whatsapp.net`` -> ``628123``)."""
    return _NON_DIGITS.sub("", jid or "")


def owner_jid(owner_number: str) -> str:
    return f"{normalize_number(owner_number)}{USER_SUFFIX}"


def is_owner(sender_id: str, owner_number: str) -> bool:
    sender = normalize_number(sender_id)
    return bool(sender) and sender == normalize_number(owner_number)


def is_group_admin(participants: Iterable[GroupParticipant], sender_id: str) -> bool:
    return any(p.id == sender_id and p.role in _ADMIN_ROLES for p in participants)
