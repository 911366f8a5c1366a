"""
Sorter Configuration

Settings for the sorter host, loaded from a YAML file. Every key is
optional; anything missing falls back to the defaults below.

Example sorter.yaml:

    encoding: utf-8-sig
    accepted_extensions: [".csv"]
    export_filename: known_contacts.csv
    log_level: INFO
    keys:
      know: ["1"]
      dont_know: ["2"]
      skip: ["3"]
      undo: ["u", "\\x1b[D"]
      quit: ["q"]
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from loguru import logger

from errors import ConfigError


LEFT_ARROW = '\x1b[D'

ACTION_KNOW = 'know'
ACTION_DONT_KNOW = 'dont_know'
ACTION_SKIP = 'skip'
ACTION_UNDO = 'undo'
ACTION_QUIT = 'quit'

DEFAULT_KEYS = {
    ACTION_KNOW: ['1'],
    ACTION_DONT_KNOW: ['2'],
    ACTION_SKIP: ['3'],
    ACTION_UNDO: ['u', LEFT_ARROW],
    ACTION_QUIT: ['q'],
}


@dataclass
class SorterConfig:
    """Configuration for the sorter host."""

    # Input
    encoding: str = 'utf-8-sig'
    accepted_extensions: List[str] = field(default_factory=lambda: ['.csv'])

    # Output
    export_filename: str = 'known_contacts.csv'

    # Key bindings, action -> keys
    keys: Dict[str, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_KEYS.items()}
    )

    # Logging
    log_level: str = 'INFO'

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'SorterConfig':
        """Create SorterConfig from config dict."""
        data = data or {}
        defaults = cls()

        keys = {k: list(v) for k, v in defaults.keys.items()}
        for action, bound in (data.get('keys') or {}).items():
            if action not in DEFAULT_KEYS:
                raise ConfigError(f"Unknown key binding action: {action}")
            if isinstance(bound, (list, tuple)):
                keys[action] = [str(k) for k in bound]
            else:
                keys[action] = [str(bound)]

        log_level = str(data.get('log_level', defaults.log_level)).upper()
        try:
            logger.level(log_level)
        except ValueError as e:
            raise ConfigError(f"Unknown log level: {log_level}") from e

        extensions = data.get('accepted_extensions', defaults.accepted_extensions)

        return cls(
            encoding=data.get('encoding', defaults.encoding),
            accepted_extensions=[e.lower() for e in extensions],
            export_filename=data.get('export_filename', defaults.export_filename),
            keys=keys,
            log_level=log_level,
        )

    def action_for_key(self, key: str) -> Optional[str]:
        """Action bound to a key press, if any."""
        for action, bound in self.keys.items():
            if key in bound:
                return action
        return None

    def key_label(self, action: str) -> str:
        """First bound key for an action, for on-screen hints."""
        bound = self.keys.get(action) or ['']
        return 'Left Arrow' if bound[0] == LEFT_ARROW else bound[0]


def load_config(config_path: Path) -> SorterConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Loaded SorterConfig

    Raises:
        ConfigError: If the file is missing or not valid YAML
    """
    logger.info(f"Loading configuration from: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config: {e}")
        raise ConfigError(f"Could not load config {config_path}: {e}") from e

    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must be a mapping")

    return SorterConfig.from_dict(data)
