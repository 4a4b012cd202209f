"""Error taxonomy for command handling.

Every error carries the text shown to the chat. Internal detail (upstream
responses, stderr, tracebacks) belongs in ``detail`` and the log, never in
the reply.
"""

from __future__ import annotations


class WabotError(Exception):
    """Base class for errors the command router converts into a reply."""

    def __init__(self, user_message: str, detail: str = ""):
        super().__init__(detail or user_message)
        self.user_message = user_message
        self.detail = detail


class ParseError(WabotError):
    """Missing or malformed command argument."""


class AuthorizationError(WabotError):
    """Sender lacks the role, or the chat is the wrong kind, for a command."""


class MediaFetchError(WabotError):
    """Gateway media could not be streamed (transport error or expired descriptor)."""


class TranscodeError(WabotError):
    """ffmpeg failed to produce a sticker."""


class UpstreamServiceError(WabotError):
    """The AI service or the short-video API failed."""


class DeliveryError(WabotError):
    """The gateway refused or failed an outbound send or group operation."""
