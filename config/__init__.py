"""
Configuration Module for Supplier Invoice Reader.

Parser tolerances, label behavior, input decoding and output options are
read from a YAML settings file instead of being hard-coded. The bundled
``config/settings.yaml`` is used unless a path is passed explicitly or the
``INVOICE_READER_CONFIG`` environment variable points elsewhere.

Usage:
    from config import get_config

    tolerance = get_config("parser.items.relative_tolerance", 0.01)
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = "INVOICE_READER_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "settings.yaml"

# Keys that must hold a non-negative number when present
_NON_NEGATIVE_KEYS = (
    "parser.items.relative_tolerance",
    "parser.items.absolute_tolerance",
    "parser.total.relative_tolerance",
)


class ConfigurationManager:
    """
    Process-wide access to the invoice reader settings.

    The first instantiation loads the settings file; later instantiations
    return the same object. Passing a different ``config_path`` switches
    the shared instance to that file.

    Attributes:
        config_path (Path): File the current settings came from.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("parser.currency.default")
        'ARS'
        >>> config.get("parser.unknown", "fallback")
        'fallback'
    """

    _instance: Optional['ConfigurationManager'] = None

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            instance = super().__new__(cls)
            instance.config_path = None
            instance._config = {}
            cls._instance = instance
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Load settings unless the requested file is already loaded.

        Args:
            config_path: Settings file. Defaults to $INVOICE_READER_CONFIG,
                then config/settings.yaml.

        Raises:
            FileNotFoundError: If the settings file doesn't exist.
            ValueError: If a tolerance setting is not a non-negative number.
            yaml.YAMLError: If the settings file is not valid YAML.
        """
        if config_path is not None:
            requested = Path(config_path)
        elif self.config_path is not None:
            return
        else:
            requested = Path(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

        if requested != self.config_path:
            self._load(requested)

    def _load(self, path: Path) -> None:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}

        self._check_tolerances(loaded)
        self._config = self._with_absolute_paths(loaded)
        self.config_path = path

    @staticmethod
    def _check_tolerances(config: Dict[str, Any]) -> None:
        for key in _NON_NEGATIVE_KEYS:
            value = _lookup(config, key, None)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ValueError(f"Configuration key '{key}' must be a non-negative number, got {value!r}")

    @staticmethod
    def _with_absolute_paths(config: Dict[str, Any]) -> Dict[str, Any]:
        """Anchor relative ``paths.*`` entries at the working directory."""
        paths = config.get('paths')
        if not paths:
            return config
        config['paths'] = {
            key: str(Path.cwd() / value) if value and not Path(value).is_absolute() else value
            for key, value in paths.items()
        }
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a value by dotted key.

        Args:
            key: Dotted key, e.g. "parser.total.reconcile".
            default: Returned when any part of the key is missing.

        Returns:
            Configuration value or default.
        """
        return _lookup(self._config, key, default)

    def get_all(self) -> Dict[str, Any]:
        """Return a shallow copy of the loaded settings."""
        return dict(self._config)

    def reload(self) -> None:
        """Re-read the current settings file."""
        self._load(self.config_path or DEFAULT_CONFIG_PATH)

    @classmethod
    def reset(cls) -> None:
        """Forget the shared instance; the next access loads settings again."""
        cls._instance = None


def _lookup(config: Dict[str, Any], key: str, default: Any) -> Any:
    value = config
    for part in key.split('.'):
        if not isinstance(value, dict) or part not in value:
            return default
        value = value[part]
    return value


def get_config(key: str, default: Any = None) -> Any:
    """
    Read one setting from the shared configuration.

    Args:
        key: Configuration key in dot notation.
        default: Default value if key doesn't exist.

    Returns:
        Configuration value or default.
    """
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'CONFIG_ENV_VAR']
