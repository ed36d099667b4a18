from __future__ import annotations

import logging

import discord

from ferod.errors import HandlerError


GENERIC_FAILURE_MESSAGE = "There was an error while executing this command!"
UNKNOWN_COMMAND_MESSAGE = "Command `{name}` not found."


async def reply_ephemeral(interaction: discord.Interaction, content: str) -> None:
    """
    Send an ephemeral reply whether or not the interaction was already answered.
    """
    try:
        if not interaction.response.is_done():
            await interaction.response.send_message(content, ephemeral=True)
        else:
            await interaction.followup.send(content, ephemeral=True)
    except discord.HTTPException as e:
        logging.warning("Could not reply to interaction %s: %s", interaction.id, e)


async def handle_command_error(interaction: discord.Interaction, error: HandlerError) -> None:
    """
    Standard handler for command handler failures.
    """
    logging.error("Command error: %s", error, exc_info=error.__cause__ or error)
    await reply_ephemeral(interaction, GENERIC_FAILURE_MESSAGE)
