"""
NATS Subject Hierarchy for PokeNews

This module defines the subject hierarchy used between the PokeNews plugin
and the game server bridge. Subjects follow a hierarchical pattern for
organized routing and filtering.

Subject Structure:
    pokenews.{category}.{specifics}...

Categories:
    - platform: Game server traffic (ticks, broadcasts, console commands)
    - commands: Player command execution requests
    - plugins: Plugin-emitted analytics events

Examples:
    pokenews.platform.server.tick
    pokenews.platform.server.broadcast
    pokenews.commands.pokenews.check
    pokenews.plugins.pokenews.phase
"""


class Subjects:
    """
    NATS subject hierarchy constants

    Use these constants to ensure consistency across the codebase.
    """

    # Base subject
    BASE = "pokenews"

    # Top-level categories
    PLATFORM = f"{BASE}.platform"      # Game server traffic
    COMMANDS = f"{BASE}.commands"      # Command execution
    PLUGINS = f"{BASE}.plugins"        # Plugin events

    # Default platform name for the game server bridge
    SERVER = "server"

    # Platform event names
    TICK = "tick"
    BROADCAST = "broadcast"
    EXECUTE = "execute"


# ========== Helper Functions ==========

def build_platform_subject(platform: str, event: str) -> str:
    """
    Build platform-specific subject

    Args:
        platform: Platform name (usually "server")
        event: Event name (tick, broadcast, execute)

    Returns:
        Subject string: pokenews.platform.{platform}.{event}

    Example:
        >>> build_platform_subject("server", "tick")
        'pokenews.platform.server.tick'
    """
    return f"{Subjects.PLATFORM}.{platform}.{event}"


def build_command_subject(plugin: str, action: str) -> str:
    """
    Build command subject

    Args:
        plugin: Plugin name
        action: Command action (check, reload)

    Returns:
        Subject string: pokenews.commands.{plugin}.{action}

    Example:
        >>> build_command_subject("pokenews", "check")
        'pokenews.commands.pokenews.check'
    """
    return f"{Subjects.COMMANDS}.{plugin}.{action}"


def build_plugin_subject(plugin: str, event: str) -> str:
    """
    Build plugin event subject

    Args:
        plugin: Plugin name
        event: Event name (phase, reloaded)

    Returns:
        Subject string: pokenews.plugins.{plugin}.{event}

    Example:
        >>> build_plugin_subject("pokenews", "phase")
        'pokenews.plugins.pokenews.phase'
    """
    return f"{Subjects.PLUGINS}.{plugin}.{event}"


def validate(subject: str) -> bool:
    """
    Validate subject format

    Args:
        subject: Subject string to validate

    Returns:
        True if valid, False otherwise

    Valid subjects:
        - Must start with "pokenews."
        - Parts separated by "."
        - No empty parts (no "..")
        - No leading/trailing dots
        - Can contain wildcards (* or >)

    Examples:
        >>> validate("pokenews.platform.server.tick")
        True
        >>> validate("pokenews.commands.pokenews.>")
        True
        >>> validate("invalid")
        False
        >>> validate("pokenews..invalid")
        False
    """
    if not subject:
        return False

    # Must start with base subject
    if not subject.startswith(f"{Subjects.BASE}."):
        return False

    parts = subject.split(".")

    # Check for empty parts
    if any(part == "" for part in parts):
        return False

    # Wildcard validation
    for i, part in enumerate(parts):
        if part == ">":
            # ">" can only be at the end
            if i != len(parts) - 1:
                return False

    return True
