"""
plugins/pokenews/scheduler.py

Tick-driven countdown scheduler.

The host calls ``advance()`` once per server tick. Each tick the scheduler
works out how many ticks remain in the cycle and classifies that number
into a Phase. Phases are edge-triggered: a phase fires only on the exact
tick where the remaining count equals its threshold.

Threshold checks run in a fixed priority order (see ``phase_thresholds``);
the first match wins and at most one phase fires per tick. Thresholds that
collide because of a misconfigured offset are not detected.
"""

import logging
import threading
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Tuple

from .settings import ConfigHolder, CountdownConfig


TICKS_PER_SECOND = 20

# Gap between the 3-2-1 final warnings
FINAL_STEP_TICKS = 20

# Debug diagnostics fire once per second of game time
DEBUG_INTERVAL_TICKS = 20

diagnostics = logging.getLogger("pokenews.diagnostics")


class Phase(Enum):
    """Announcement phase of the countdown cycle."""

    IDLE = "idle"
    PRE_EVENT = "pre_event"
    FINAL_3 = "final_3"
    FINAL_2 = "final_2"
    FINAL_1 = "final_1"
    STOLEN = "stolen"


class QueryPhase(Enum):
    """Which message an on-demand query gets."""

    GRACE = "grace"
    PENDING = "pending"


# Phase -> config field holding its announcement template
PHASE_TEMPLATES: Dict[Phase, str] = {
    Phase.PRE_EVENT: "message_pre_event",
    Phase.FINAL_3: "message_final_3",
    Phase.FINAL_2: "message_final_2",
    Phase.FINAL_1: "message_final_1",
    Phase.STOLEN: "message_stolen",
}

QUERY_TEMPLATES: Dict[QueryPhase, str] = {
    QueryPhase.GRACE: "message_grace_period",
    QueryPhase.PENDING: "message_pending",
}


def phase_thresholds(config: CountdownConfig) -> Tuple[Tuple[Phase, int], ...]:
    """
    Thresholds in evaluation order.

    Returns:
        (phase, remaining_ticks) pairs, highest priority first.
    """
    final = config.final_countdown_offset
    return (
        (Phase.STOLEN, 0),
        (Phase.FINAL_1, final),
        (Phase.FINAL_2, final + FINAL_STEP_TICKS),
        (Phase.FINAL_3, final + 2 * FINAL_STEP_TICKS),
        (Phase.PRE_EVENT, config.pre_event_offset),
    )


def classify(remaining: int, config: CountdownConfig) -> Phase:
    """
    Classify a remaining-tick count.

    Args:
        remaining: Ticks left in the cycle.
        config: Config snapshot supplying the thresholds.

    Returns:
        The first phase whose threshold equals ``remaining``, else IDLE.
    """
    for phase, threshold in phase_thresholds(config):
        if remaining == threshold:
            return phase
    return Phase.IDLE


def template_for(phase: Phase, config: CountdownConfig) -> Optional[str]:
    """Announcement template for a phase, or None for IDLE."""
    field_name = PHASE_TEMPLATES.get(phase)
    if field_name is None:
        return None
    return getattr(config, field_name)


def query_template_for(phase: QueryPhase, config: CountdownConfig) -> str:
    return getattr(config, QUERY_TEMPLATES[phase])


class CountdownScheduler:
    """
    Owns the tick counter for the single running countdown.

    The scheduler has no timer of its own; the host drives it. Callbacks
    are awaited after the counter update, so nothing inside the critical
    section ever suspends.

    Args:
        holder: Holder of the active config (shared with the announcer).
        on_phase: Async callback called with (phase, config) whenever a
            non-IDLE phase fires.
        on_terminal: Async callback called with the terminal action
            command when the cycle completes.
    """

    def __init__(
        self,
        holder: ConfigHolder,
        on_phase: Optional[Callable[[Phase, CountdownConfig], Awaitable[None]]] = None,
        on_terminal: Optional[Callable[[str], Awaitable[None]]] = None
    ):
        self.holder = holder
        self.on_phase = on_phase
        self.on_terminal = on_terminal
        self._elapsed = 0
        self._lock = threading.Lock()
        self.logger = logging.getLogger(f"{__name__}.CountdownScheduler")

    @property
    def elapsed_ticks(self) -> int:
        return self._elapsed

    @property
    def config(self) -> CountdownConfig:
        return self.holder.current

    async def advance(self) -> Phase:
        """
        Process one host tick.

        Increments the counter and fires at most one phase. On STOLEN the
        terminal announcement goes out first, then the terminal action,
        then the cycle restarts at zero.

        Returns:
            The phase that fired this tick (IDLE if none).
        """
        with self._lock:
            config = self.holder.current
            self._elapsed += 1
            elapsed = self._elapsed
            remaining = config.cycle_length - elapsed
            phase = classify(remaining, config)

        if config.debug and remaining % DEBUG_INTERVAL_TICKS == 0:
            diagnostics.info(f"[DEBUG] TickCounter: {elapsed} | Remaining: {remaining}")

        if phase is Phase.IDLE:
            return phase

        self.logger.debug(f"Phase {phase.value} fired at tick {elapsed}")

        if self.on_phase:
            try:
                await self.on_phase(phase, config)
            except Exception as e:
                self.logger.exception(f"Error in phase callback for {phase.value}: {e}")

        if phase is Phase.STOLEN:
            if self.on_terminal:
                try:
                    await self.on_terminal(config.terminal_action)
                except Exception as e:
                    self.logger.exception(f"Error running terminal action: {e}")
            if config.debug:
                diagnostics.info(f"[DEBUG] Executed: {config.terminal_action}")

            with self._lock:
                # A reload during the callbacks already reset the cycle
                if self._elapsed == elapsed:
                    self._elapsed = 0
            self.logger.info("Countdown cycle complete, timer reset")

        return phase

    def remaining(self) -> int:
        """Ticks left in the current cycle, never negative."""
        with self._lock:
            return max(0, self.holder.current.cycle_length - self._elapsed)

    def query_phase(self, remaining: int) -> QueryPhase:
        """
        Classify a remaining count for on-demand queries.

        The threshold itself counts as PENDING.
        """
        if remaining > self.holder.current.pending_threshold:
            return QueryPhase.GRACE
        return QueryPhase.PENDING

    def reload(self, config: CountdownConfig) -> None:
        """Install a new config and restart the cycle from zero."""
        with self._lock:
            self.holder.replace(config)
            self._elapsed = 0
        self.logger.info(f"Countdown reloaded (cycle: {config.cycle_length} ticks)")
