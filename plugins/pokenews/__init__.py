"""
plugins/pokenews/__init__.py

PokeNews countdown plugin.

Provides the recurring Team Rocket raid countdown with:
- Tick-driven scheduler with prioritized 3-2-1 warnings
- Ampersand colour/format markup for every message
- On-demand time remaining queries (grace / pending messages)
- Operator reload of the JSON/YAML config
"""

from .announcer import AnnouncementDispatcher, format_time
from .errors import ConfigLoadError, ConfigPersistError, PokeNewsError
from .markup import Format, MarkupCompiler, StyledText, TextRun, compile_markup
from .plugin import PokeNewsPlugin
from .scheduler import CountdownScheduler, Phase, QueryPhase, classify
from .settings import ConfigHolder, ConfigStore, CountdownConfig

__all__ = [
    "AnnouncementDispatcher",
    "ConfigHolder",
    "ConfigLoadError",
    "ConfigPersistError",
    "ConfigStore",
    "CountdownConfig",
    "CountdownScheduler",
    "Format",
    "MarkupCompiler",
    "Phase",
    "PokeNewsError",
    "PokeNewsPlugin",
    "QueryPhase",
    "StyledText",
    "TextRun",
    "classify",
    "compile_markup",
    "format_time",
]
