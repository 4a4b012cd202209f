"""Command router: parse -> authorize -> execute -> respond.

The router is the single error boundary for command handling. Handlers
raise; the router turns every failure into a reply and never lets an
exception escape into the gateway's event loop.
"""

from __future__ import annotations

from typing import Iterable

from wabot import texts
from wabot.commands import ai, group, info, media, recovery
from wabot.commands.base import BotServices, CommandContext, CommandSpec, parse_command
from wabot.core.auth import is_group_admin, is_owner
from wabot.core.errors import AuthorizationError, WabotError
from wabot.core.types import AuthLevel
from wabot.log import bind_message_context, clear_message_context, get_logger
from wabot.messenger.models import InboundMessage

logger = get_logger(__name__)


def default_commands() -> list[CommandSpec]:
    """The bot's built-in command table."""
    return [
        CommandSpec("menu", info.menu),
        CommandSpec("owner", info.owner),
        CommandSpec("bot", info.bot_info),
        CommandSpec("runtime", info.runtime, aliases=("uptime",)),
        CommandSpec("ai", ai.ask, failure_text=texts.AI_FAILURE),
        CommandSpec("ttdl", media.tiktok_download, failure_text=texts.TTDL_FAILURE),
        CommandSpec("sticker", media.sticker, failure_text=texts.STICKER_FETCH_FAILURE),
        CommandSpec("s", media.status_download, failure_text=texts.STATUS_FAILURE),
        CommandSpec(
            "setname",
            group.set_name,
            auth=AuthLevel.GROUP_ADMIN,
            denied_text=texts.SETNAME_DENIED,
            failure_text=texts.SETNAME_FAILURE,
        ),
        CommandSpec(
            "setdesc",
            group.set_description,
            auth=AuthLevel.GROUP_ADMIN,
            denied_text=texts.SETDESC_DENIED,
            failure_text=texts.SETDESC_FAILURE,
        ),
        CommandSpec(
            "kick",
            group.kick,
            auth=AuthLevel.GROUP_ADMIN,
            denied_text=texts.KICK_DENIED,
            failure_text=texts.KICK_FAILURE,
        ),
        CommandSpec(
            "tagall",
            group.tag_all,
            auth=AuthLevel.GROUP_ADMIN,
            denied_text=texts.TAGALL_DENIED,
        ),
        CommandSpec("k", recovery.recover_deleted, failure_text=texts.RECOVER_FAILURE),
    ]


class CommandRouter:
    """Maps command tokens to handlers and runs one invocation per message."""

    def __init__(self, services: BotServices, commands: Iterable[CommandSpec] | None = None):
        self._services = services
        self._trigger = services.config.bot.trigger
        self._commands: dict[str, CommandSpec] = {}
        for spec in default_commands() if commands is None else commands:
            self.register(spec)

    def register(self, spec: CommandSpec) -> None:
        for token in (spec.name, *spec.aliases):
            self._commands[token.lower()] = spec
        logger.debug("command_registered", command=spec.name, auth=str(spec.auth))

    def get(self, token: str) -> CommandSpec | None:
        return self._commands.get(token.lower())

    def names(self) -> list[str]:
        return sorted({spec.name for spec in self._commands.values()})

    async def dispatch(self, message: InboundMessage) -> bool:
        """Handle one inbound message. Returns True if it invoked a command."""
        body = message.text_surface
        parsed = parse_command(body, self._trigger)
        spec = self.get(parsed.command) if parsed else None
        if parsed is None or spec is None:
            logger.info(
                "chat_message",
                chat_id=message.conversation_id,
                sender=message.display_name,
                body=body,
            )
            return False

        ctx = CommandContext(
            message=message,
            command=parsed.command,
            argument=parsed.argument,
            services=self._services,
        )
        bind_message_context(message.conversation_id, message.id, spec.name)
        try:
            logger.info("command_dispatched", sender=message.sender_id)
            await self._authorize(spec, ctx)
            await spec.handler(ctx)
        except AuthorizationError as e:
            logger.info("command_refused", reason=e.detail or e.user_message)
            await self._safe_reply(ctx, e.user_message)
        except WabotError as e:
            logger.warning("command_failed", error_type=type(e).__name__, detail=e.detail)
            await self._safe_reply(ctx, e.user_message)
        except Exception as e:
            logger.error("command_error", error=str(e), exc_info=True)
            await self._safe_reply(ctx, spec.failure_text or texts.GENERIC_FAILURE)
        finally:
            clear_message_context()
        return True

    async def _authorize(self, spec: CommandSpec, ctx: CommandContext) -> None:
        message = ctx.message
        match spec.auth:
            case AuthLevel.OPEN:
                return
            case AuthLevel.OWNER:
                if not is_owner(message.sender_id, self._services.config.owner.number):
                    raise AuthorizationError(spec.denied_text or texts.OWNER_ONLY, detail="not owner")
            case AuthLevel.GROUP_ADMIN:
                if not message.is_group:
                    raise AuthorizationError(texts.GROUP_ONLY, detail="not a group chat")
                # Always fetched fresh: a demoted admin must lose access immediately.
                metadata = await self._services.gateway.group_metadata(message.conversation_id)
                if not is_group_admin(metadata.participants, message.sender_id):
                    raise AuthorizationError(spec.denied_text or texts.GENERIC_FAILURE, detail="not admin")
                ctx.group = metadata

    async def _safe_reply(self, ctx: CommandContext, text: str) -> None:
        try:
            await ctx.reply(text)
        except Exception as e:
            logger.error("error_reply_failed", error=str(e))
