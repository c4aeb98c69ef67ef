"""
plugins/pokenews/announcer.py

Announcement delivery.

Resolves message templates against the active config, compiles them with
the markup compiler, and publishes the result over NATS: announcements to
the server-wide broadcast subject, query responses to the reply subject of
the player who asked.
"""

import json
import logging
from typing import Any, Dict, Optional

from nats.aio.client import Client as NATS

from .markup import MarkupCompiler, StyledText
from .scheduler import TICKS_PER_SECOND
from .settings import ConfigHolder, CountdownConfig


TIME_PLACEHOLDER = "{time}"


def format_time(total_seconds: int) -> str:
    """
    Format seconds as ``"1h 2m 3s"``, dropping the hours when zero.

    Examples:
        >>> format_time(3723)
        '1h 2m 3s'
        >>> format_time(95)
        '1m 35s'
    """
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    return f"{minutes}m {seconds}s"


def styled_payload(text: StyledText) -> Dict[str, Any]:
    """Wire form of styled text, consumed by the host bridge."""
    return {
        "text": text.plain_text,
        "component": text.to_component(),
        "legacy": text.to_legacy(),
    }


class AnnouncementDispatcher:
    """
    Compiles templates and delivers them to players.

    Args:
        nats_client: Connected NATS client.
        holder: Holder of the active config (for the prefix template).
        broadcast_subject: Subject the host bridge relays to every player.
        compiler: Markup compiler (defaults to MarkupCompiler()).
    """

    def __init__(
        self,
        nats_client: NATS,
        holder: ConfigHolder,
        broadcast_subject: str,
        compiler: Optional[MarkupCompiler] = None
    ):
        self.nats = nats_client
        self.holder = holder
        self.broadcast_subject = broadcast_subject
        self.compiler = compiler or MarkupCompiler()
        self.logger = logging.getLogger(f"{__name__}.AnnouncementDispatcher")

    def render(self, template: str, config: Optional[CountdownConfig] = None) -> StyledText:
        """
        Prefix a template and compile it.

        Args:
            template: Message template.
            config: Config snapshot to take the prefix from. Defaults to
                the active config.
        """
        config = config or self.holder.current
        return self.compiler.compile(config.message_prefix + template)

    def render_response(self, template: str, remaining_ticks: int) -> StyledText:
        """Render a query response with ``{time}`` filled in."""
        time_string = format_time(remaining_ticks // TICKS_PER_SECOND)
        return self.render(template.replace(TIME_PLACEHOLDER, time_string))

    async def announce(
        self, template: str, config: Optional[CountdownConfig] = None
    ) -> StyledText:
        """
        Broadcast a template to every connected player.

        No placeholder substitution is done.

        Returns:
            The styled text that was sent.
        """
        text = self.render(template, config)
        payload = {"type": "announcement", **styled_payload(text)}
        await self.nats.publish(self.broadcast_subject, json.dumps(payload).encode())
        self.logger.info(f"Announced: {text.plain_text}")
        return text

    async def respond(
        self, template: str, remaining_ticks: int, reply_to: Optional[str]
    ) -> StyledText:
        """
        Answer a time-remaining query for a single player.

        A template without ``{time}`` is sent unchanged.

        Args:
            template: Grace or pending template.
            remaining_ticks: Ticks left in the cycle.
            reply_to: Reply subject of the requesting player.

        Returns:
            The styled text that was sent.
        """
        text = self.render_response(template, remaining_ticks)
        await self.reply(reply_to, {
            "success": True,
            "result": {
                "remaining_ticks": remaining_ticks,
                **styled_payload(text),
            }
        })
        return text

    async def confirm(self, body: str, reply_to: Optional[str]) -> StyledText:
        """Send a prefixed confirmation message to a single player."""
        text = self.render(body)
        await self.reply(reply_to, {
            "success": True,
            "result": styled_payload(text)
        })
        return text

    async def reply(self, reply_to: Optional[str], response: dict) -> None:
        """Publish a raw response dict to a single player."""
        if reply_to:
            await self.nats.publish(reply_to, json.dumps(response).encode())
        else:
            self.logger.debug("No reply subject; response dropped")
