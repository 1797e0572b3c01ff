"""
Alert notification channels.

Components:
    discord: Discord webhook embeds
"""

from mm_monitor.detection.channels.discord import (
    DiscordChannel,
    SEVERITY_COLORS,
    create_discord_channel,
)

__all__ = [
    "DiscordChannel",
    "SEVERITY_COLORS",
    "create_discord_channel",
]
