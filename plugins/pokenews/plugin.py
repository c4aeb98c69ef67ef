"""
plugins/pokenews/plugin.py

PokeNews countdown plugin using NATS-based architecture.

NATS Subjects:
    Subscribed:
        pokenews.platform.server.tick - One message per server tick
        pokenews.commands.pokenews.check - Check time until the next raid
        pokenews.commands.pokenews.reload - Reload config and reset the timer

    Published:
        pokenews.platform.server.broadcast - Styled announcement for all players
        pokenews.platform.server.execute - Terminal action for the server console
        pokenews.plugins.pokenews.phase - A countdown phase fired
        pokenews.plugins.pokenews.reloaded - Config was reloaded

The server bridge owns the player list and the chat channel; this plugin
only publishes styled text and lets the bridge deliver it.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from nats.aio.client import Client as NATS

from core.subjects import (
    Subjects,
    build_command_subject,
    build_platform_subject,
    build_plugin_subject,
    validate,
)

from .announcer import AnnouncementDispatcher
from .errors import PokeNewsError
from .scheduler import (
    CountdownScheduler,
    Phase,
    query_template_for,
    template_for,
)
from .settings import DEFAULT_CONFIG_PATH, ConfigHolder, ConfigStore, CountdownConfig


class PokeNewsPlugin:
    """
    Team Rocket raid countdown plugin.

    Commands:
        !pokenews - Show time until the next raid
        !pokenews reload - Reload config and reset the timer (operators only)

    Configuration:
        config_path: Countdown config file (default: config/pokenews_config.json)
        platform: Server bridge name used in subjects (default: "server")
        reload_permission_level: Minimum permission level for reload (default: 4)
        emit_events: Whether to emit analytics events (default: true)
    """

    # Plugin metadata
    NAMESPACE = "pokenews"
    VERSION = "1.0.0"
    DESCRIPTION = "Announce the recurring Team Rocket raid countdown"

    # Permission level the server runs the terminal action with
    TERMINAL_PERMISSION_LEVEL = 4

    # NATS subjects - Commands
    SUBJECT_CHECK = build_command_subject(NAMESPACE, "check")
    SUBJECT_RELOAD = build_command_subject(NAMESPACE, "reload")

    # NATS subjects - Events
    EVENT_PHASE = build_plugin_subject(NAMESPACE, "phase")
    EVENT_RELOADED = build_plugin_subject(NAMESPACE, "reloaded")

    def __init__(self, nats_client: NATS, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the PokeNews plugin.

        Args:
            nats_client: Connected NATS client for messaging.
            config: Optional configuration dictionary.
        """
        self.nats = nats_client
        self.config = config or {}
        self.logger = logging.getLogger(f"plugin.{self.NAMESPACE}")

        # Configuration with defaults
        self.config_path = self.config.get("config_path", DEFAULT_CONFIG_PATH)
        self.platform = self.config.get("platform", Subjects.SERVER)
        self.reload_permission_level = self.config.get("reload_permission_level", 4)
        self.emit_events = self.config.get("emit_events", True)

        # Server bridge subjects
        self.subject_tick = build_platform_subject(self.platform, Subjects.TICK)
        self.subject_broadcast = build_platform_subject(self.platform, Subjects.BROADCAST)
        self.subject_execute = build_platform_subject(self.platform, Subjects.EXECUTE)

        self.store = ConfigStore(self.config_path)
        self.holder: Optional[ConfigHolder] = None
        self.scheduler: Optional[CountdownScheduler] = None
        self.announcer: Optional[AnnouncementDispatcher] = None

        # Subscription tracking
        self._subscriptions = []
        self._initialized = False

    async def initialize(self) -> None:
        """
        Initialize the plugin.

        - Loads the countdown config (writing defaults if needed)
        - Builds the scheduler and announcer around one config holder
        - Subscribes to NATS subjects

        Raises:
            PokeNewsError: If the platform name produces invalid subjects.
        """
        self.logger.info(f"Initializing {self.NAMESPACE} plugin v{self.VERSION}")

        for subject in (self.subject_tick, self.subject_broadcast, self.subject_execute):
            if not validate(subject):
                raise PokeNewsError(f"Invalid platform subject: {subject}")

        self.holder = ConfigHolder(await self._load_config())
        self.announcer = AnnouncementDispatcher(
            self.nats, self.holder, self.subject_broadcast
        )
        self.scheduler = CountdownScheduler(
            self.holder,
            on_phase=self._on_phase,
            on_terminal=self._on_terminal
        )

        sub = await self.nats.subscribe(self.subject_tick, cb=self._handle_tick)
        self._subscriptions.append(sub)

        sub = await self.nats.subscribe(self.SUBJECT_CHECK, cb=self._handle_check)
        self._subscriptions.append(sub)

        sub = await self.nats.subscribe(self.SUBJECT_RELOAD, cb=self._handle_reload)
        self._subscriptions.append(sub)

        self._initialized = True
        self.logger.info(
            f"{self.NAMESPACE} plugin loaded "
            f"(cycle: {self.holder.current.cycle_length} ticks)"
        )

    async def shutdown(self) -> None:
        """
        Shutdown the plugin.

        Unsubscribes from all NATS subjects. Countdown state is not kept.
        """
        for sub in self._subscriptions:
            await sub.unsubscribe()
        self._subscriptions.clear()

        self._initialized = False
        self.logger.info(f"{self.NAMESPACE} plugin unloaded")

    # =========================================================================
    # Command Handlers
    # =========================================================================

    async def _handle_tick(self, msg) -> None:
        """Handle one server tick. The payload is ignored."""
        try:
            await self.scheduler.advance()
        except Exception as e:
            self.logger.exception(f"Error handling tick: {e}")

    async def _handle_check(self, msg) -> None:
        """
        Handle !pokenews to report time until the next raid.

        Message format:
        {
            "user": "string",
            "reply_to": "pokenews.reply.xyz"
        }
        """
        try:
            data = json.loads(msg.data.decode()) if msg.data else {}
            if not isinstance(data, dict):
                data = {}
            reply_to = data.get("reply_to") or msg.reply

            remaining = self.scheduler.remaining()
            phase = self.scheduler.query_phase(remaining)
            template = query_template_for(phase, self.scheduler.config)

            await self.announcer.respond(template, remaining, reply_to)
            self.logger.debug(
                f"Check by {data.get('user', 'unknown')}: "
                f"{remaining} ticks ({phase.value})"
            )

        except json.JSONDecodeError as e:
            self.logger.error(f"Invalid JSON in check request: {e}")
        except Exception as e:
            self.logger.exception(f"Error handling check: {e}")

    async def _handle_reload(self, msg) -> None:
        """
        Handle !pokenews reload.

        Message format:
        {
            "user": "string",
            "permission_level": 4,
            "reply_to": "pokenews.reply.xyz"
        }
        """
        try:
            data = json.loads(msg.data.decode()) if msg.data else {}
            if not isinstance(data, dict):
                data = {}
            user = data.get("user", "unknown")
            reply_to = data.get("reply_to") or msg.reply
            permission_level = data.get("permission_level", 0)

            if not isinstance(permission_level, int) or \
                    permission_level < self.reload_permission_level:
                self.logger.warning(f"Reload denied for {user} (level {permission_level})")
                await self.announcer.reply(reply_to, {
                    "success": False,
                    "error": "You don't have permission to reload PokeNews"
                })
                return

            config = await self._load_config()
            self.scheduler.reload(config)
            await self.announcer.confirm(config.message_reload, reply_to)

            if self.emit_events:
                await self._emit_event(self.EVENT_RELOADED, {
                    "user": user,
                    "cycle_length": config.cycle_length,
                })

            self.logger.info(f"Config reloaded by {user}, timer reset")

        except json.JSONDecodeError as e:
            self.logger.error(f"Invalid JSON in reload request: {e}")
        except Exception as e:
            self.logger.exception(f"Error handling reload: {e}")

    # =========================================================================
    # Scheduler Callbacks
    # =========================================================================

    async def _on_phase(self, phase: Phase, config: CountdownConfig) -> None:
        """
        Broadcast the announcement for a fired phase.

        Args:
            phase: The phase that fired.
            config: Config snapshot the tick was evaluated against.
        """
        template = template_for(phase, config)
        text = await self.announcer.announce(template, config)

        if self.emit_events:
            await self._emit_event(self.EVENT_PHASE, {
                "phase": phase.value,
                "message": text.plain_text,
            })

    async def _on_terminal(self, command: str) -> None:
        """
        Ask the server to run the terminal action.

        Args:
            command: Console command from the config.
        """
        await self.nats.publish(
            self.subject_execute,
            json.dumps({
                "command": command,
                "permission_level": self.TERMINAL_PERMISSION_LEVEL,
                "source": self.NAMESPACE,
            }).encode()
        )
        self.logger.info(f"Terminal action sent: {command}")

    # =========================================================================
    # Direct API
    # =========================================================================

    def status(self) -> Dict[str, Any]:
        """
        Current countdown state (synchronous API).

        Returns:
            Dict with elapsed/remaining ticks and the query phase.
        """
        remaining = self.scheduler.remaining()
        return {
            "elapsed_ticks": self.scheduler.elapsed_ticks,
            "remaining_ticks": remaining,
            "query_phase": self.scheduler.query_phase(remaining).value,
        }

    # =========================================================================
    # Utility Methods
    # =========================================================================

    async def _load_config(self) -> CountdownConfig:
        """Load the countdown config off the event loop (file I/O)."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.store.load)

    async def _emit_event(self, event_type: str, data: dict) -> None:
        """
        Emit an event via NATS.

        Args:
            event_type: The event subject.
            data: Event data.
        """
        event = {
            "event": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **data
        }
        await self.nats.publish(event_type, json.dumps(event).encode())
