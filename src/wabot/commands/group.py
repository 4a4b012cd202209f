"""Group administration commands.

The router has already confirmed the chat is a group and the sender an
admin, and maps gateway failures to each command's failure text.
"""

from __future__ import annotations

from wabot import texts
from wabot.commands.base import CommandContext
from wabot.core.errors import ParseError
from wabot.log import get_logger

logger = get_logger(__name__)


async def set_name(ctx: CommandContext) -> None:
    if not ctx.argument:
        raise ParseError(texts.SETNAME_EXAMPLE)
    await ctx.services.gateway.group_update_subject(ctx.chat_id, ctx.argument)
    logger.info("group_subject_updated")
    await ctx.reply(texts.SETNAME_DONE)


async def set_description(ctx: CommandContext) -> None:
    if not ctx.argument:
        raise ParseError(texts.SETDESC_EXAMPLE)
    await ctx.services.gateway.group_update_description(ctx.chat_id, ctx.argument)
    logger.info("group_description_updated")
    await ctx.reply(texts.SETDESC_DONE)


async def kick(ctx: CommandContext) -> None:
    targets = list(ctx.message.mentions)
    if not targets:
        raise ParseError(texts.KICK_NEED_MENTION)
    await ctx.services.gateway.group_participants_remove(ctx.chat_id, targets)
    logger.info("group_participants_removed", count=len(targets))
    await ctx.reply(texts.KICK_DONE)


async def tag_all(ctx: CommandContext) -> None:
    group = ctx.group
    if group is None:
        group = await ctx.services.gateway.group_metadata(ctx.chat_id)
    mentions = tuple(p.id for p in group.participants)
    await ctx.reply(texts.TAGALL_TEXT, mentions=mentions)
