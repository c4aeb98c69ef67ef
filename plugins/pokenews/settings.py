"""
plugins/pokenews/settings.py

Countdown configuration model, file store, and the holder that owns the
active configuration.

The config file is a pretty-printed JSON document (or YAML when the path
ends in .yaml/.yml). A missing or unparsable file is never fatal: the
defaults are used and written back so operators have something to edit.
"""

import dataclasses
import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import ConfigLoadError, ConfigPersistError


DEFAULT_CONFIG_PATH = "config/pokenews_config.json"

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass(frozen=True)
class CountdownConfig:
    """
    Tunable countdown parameters and message templates.

    All offsets are in ticks counted back from the end of the cycle.
    Templates use ampersand markup; the grace and pending templates
    carry a single ``{time}`` placeholder.

    Attributes:
        cycle_length: Ticks per cycle.
        pre_event_offset: Remaining ticks at which the early warning fires.
        final_countdown_offset: Remaining ticks at which the last
            "1 second" warning fires. The 2 and 3 second warnings sit
            20 and 40 ticks before it.
        pending_threshold: Remaining ticks at or below which queries get
            the pending message instead of the grace message.
        terminal_action: Command the host runs when the cycle completes.
        debug: Emit per-second diagnostics to the log.
    """

    cycle_length: int = 36000
    pre_event_offset: int = 600
    final_countdown_offset: int = 60
    pending_threshold: int = 12000
    terminal_action: str = "pokekill"
    debug: bool = False

    message_prefix: str = (
        "&#ffffff&l[&#dd959c&lP&#dd959c&lo&#dd959c&lk&#dd959c&lé"
        "&#ffffff&lN&#ffffff&le&#ffffff&lw&#ffffff&ls&#ffffff&l] &#3b4cca&l"
    )
    message_pre_event: str = "Team Rocket is plotting to steal wild Pokémon in 30 seconds!"
    message_final_3: str = "Team Rocket will steal all wild Pokémon in 3 seconds!"
    message_final_2: str = "Team Rocket will steal all wild Pokémon in 2 seconds!"
    message_final_1: str = "Team Rocket will steal all wild Pokémon in 1 second!"
    message_stolen: str = "Team Rocket has stolen all wild Pokémon!"
    message_grace_period: str = (
        "No major news. Team Rocket is counting Pokémon! Next wipe in &#ffffff&l{time}"
    )
    message_pending: str = (
        "Team Rocket is lurking nearby and will steal wild Pokémon soon! "
        "Time left: &#ffffff&l{time}"
    )
    message_reload: str = " Config reloaded. Timer reset!"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CountdownConfig":
        """
        Build a config from a parsed document.

        Unknown keys are ignored and missing keys keep their defaults.

        Raises:
            ConfigLoadError: If the document is not a mapping, a value has
                the wrong type, or cycle_length is not positive.
        """
        if not isinstance(data, dict):
            raise ConfigLoadError(
                f"Config document must be a mapping, got {type(data).__name__}"
            )

        values = {}
        for config_field in dataclasses.fields(cls):
            if config_field.name not in data:
                continue
            value = data[config_field.name]
            expected = config_field.type
            # bool is an int subclass; keep the two apart
            if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
                raise ConfigLoadError(f"'{config_field.name}' must be an integer")
            if expected is bool and not isinstance(value, bool):
                raise ConfigLoadError(f"'{config_field.name}' must be true or false")
            if expected is str and not isinstance(value, str):
                raise ConfigLoadError(f"'{config_field.name}' must be a string")
            values[config_field.name] = value

        config = cls(**values)
        if config.cycle_length <= 0:
            raise ConfigLoadError("'cycle_length' must be a positive number of ticks")
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict in declaration order."""
        return dataclasses.asdict(self)


class ConfigStore:
    """
    Reads and writes the countdown config file.

    Args:
        path: Location of the config file. Parent directories are
            created on save.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_CONFIG_PATH):
        self.path = Path(path)
        self.logger = logging.getLogger(f"{__name__}.ConfigStore")

    @property
    def is_yaml(self) -> bool:
        return self.path.suffix.lower() in YAML_SUFFIXES

    def load(self) -> CountdownConfig:
        """
        Load the config, falling back to defaults.

        When the file is missing or cannot be parsed the defaults are
        returned and persisted in its place.

        Returns:
            The loaded (or default) configuration.
        """
        try:
            config = self._read()
            self.logger.info(f"Loaded countdown config from {self.path}")
            return config
        except ConfigLoadError as e:
            self.logger.warning(f"Using default countdown config: {e}")

        config = CountdownConfig()
        self.save(config)
        return config

    def save(self, config: CountdownConfig) -> bool:
        """
        Persist a config.

        Write failures are logged and swallowed; the in-memory config
        stays authoritative.

        Returns:
            True if the file was written.
        """
        try:
            self._write(config)
        except ConfigPersistError as e:
            self.logger.error(f"Failed to save countdown config: {e}")
            return False
        self.logger.debug(f"Saved countdown config to {self.path}")
        return True

    def _read(self) -> CountdownConfig:
        if not self.path.exists():
            raise ConfigLoadError(f"{self.path} does not exist")

        try:
            with open(self.path, "r", encoding="utf-8") as fp:
                if self.is_yaml:
                    data = yaml.safe_load(fp)
                else:
                    data = json.load(fp)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigLoadError(f"Could not parse {self.path}: {e}") from e

        return CountdownConfig.from_dict(data)

    def _write(self, config: CountdownConfig) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as fp:
                if self.is_yaml:
                    yaml.safe_dump(
                        config.to_dict(), fp,
                        allow_unicode=True, sort_keys=False, default_flow_style=False
                    )
                else:
                    json.dump(config.to_dict(), fp, indent=2, ensure_ascii=False)
                    fp.write("\n")
        except OSError as e:
            raise ConfigPersistError(f"Could not write {self.path}: {e}") from e


class ConfigHolder:
    """
    Owns the single active CountdownConfig.

    Readers take one snapshot via ``current`` and use it for the whole
    operation; ``replace`` swaps the whole object, never individual fields.
    """

    def __init__(self, config: Optional[CountdownConfig] = None):
        self._config = config or CountdownConfig()
        self._lock = threading.Lock()

    @property
    def current(self) -> CountdownConfig:
        with self._lock:
            return self._config

    def replace(self, config: CountdownConfig) -> CountdownConfig:
        """
        Install a new config.

        Returns:
            The config that was active before the swap.
        """
        with self._lock:
            previous, self._config = self._config, config
        return previous
