#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
import sys

import yaml


DEFAULT_NATS_URL = 'nats://localhost:4222'

LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'


class RobustFileHandler(logging.FileHandler):
    """FileHandler that gracefully handles flush errors on Windows"""

    def flush(self):
        """Flush the stream, catching OSError on Windows file handles"""
        try:
            super().flush()
        except OSError as e:
            # EINVAL from a Windows handle in an inconsistent state
            if e.errno == 22:
                pass
            else:
                raise


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    # Create file handler if path string, otherwise stream handler
    if isinstance(log_file, str):
        handler = RobustFileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler(log_file)  # Default to stderr if None

    formatter = logging.Formatter(log_format)

    # Get logger by name if string provided
    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def parse_log_level(name, default=logging.INFO):
    """Map a level name like "debug" to its logging constant

    Unknown names fall back to ``default``.
    """
    level = getattr(logging, str(name).upper(), None)
    if isinstance(level, int):
        return level
    return default


def load_config_file(config_file):
    """Read a JSON or YAML config file into a dictionary

    Args:
        config_file: Path to the file; .yaml/.yml is parsed as YAML,
                     anything else as JSON

    Returns:
        Configuration dictionary (empty if the file is empty)
    """
    with open(config_file, 'r', encoding='utf-8') as fp:
        if str(config_file).endswith(('.yaml', '.yml')):
            conf = yaml.safe_load(fp)
        else:
            conf = json.load(fp)
    return conf or {}


def get_config(config_file=None):
    """Load and parse configuration from JSON or YAML file

    Args:
        config_file: Config file path. Taken from the command line when
                     omitted.

    Returns:
        Tuple of (conf, kwargs) where:
            conf: Full configuration dictionary from config file
            kwargs: NATS connection parameters extracted from config

    Exits:
        Exits with status 1 if incorrect number of arguments
    """
    if config_file is None:
        if len(sys.argv) != 2:
            print('usage: %s <config file>' % sys.argv[0], file=sys.stderr)
            sys.exit(1)
        config_file = sys.argv[1]

    conf = load_config_file(config_file)

    logging_config = conf.get('logging', {})
    log_level = parse_log_level(logging_config.get('level', 'info'))

    # Configure root logger with basic settings
    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    nats_config = conf.get('nats', {})
    servers = nats_config.get('servers') or [nats_config.get('url', DEFAULT_NATS_URL)]

    return conf, {
        'servers': servers,
        'max_reconnect_attempts': nats_config.get('max_reconnect_attempts', -1),
        'reconnect_time_wait': nats_config.get('reconnect_delay', 2),
        'connect_timeout': nats_config.get('connection_timeout', 5),
    }
