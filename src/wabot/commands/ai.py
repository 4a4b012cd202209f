"""The ``ai`` command: forward a question to the completion service."""

from __future__ import annotations

from wabot import texts
from wabot.commands.base import CommandContext
from wabot.core.errors import ParseError


async def ask(ctx: CommandContext) -> None:
    if not ctx.argument:
        raise ParseError(texts.AI_EXAMPLE)
    await ctx.reply(texts.AI_THINKING)
    answer = await ctx.services.ai.ask(ctx.argument)
    await ctx.reply(answer)
