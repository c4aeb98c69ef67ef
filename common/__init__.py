"""Common utilities for PokeNews services."""
from .config import configure_logger, get_config, load_config_file

__all__ = ['get_config', 'configure_logger', 'load_config_file']
