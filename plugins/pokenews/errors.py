"""
plugins/pokenews/errors.py

PokeNews-specific exceptions.
"""


class PokeNewsError(Exception):
    """Base exception for PokeNews errors."""
    pass


class ConfigLoadError(PokeNewsError):
    """Countdown config file missing, unreadable, or malformed."""
    pass


class ConfigPersistError(PokeNewsError):
    """Countdown config could not be written to disk."""
    pass
