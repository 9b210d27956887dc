"""
Configuration package for the pack slip pipeline.

settings.yaml holds runtime parameters (rasterization, OCR, parser limits,
storage, webhook delivery). Data files such as the vendor catalog sit next
to it and are located with config_file().

Values are read with dotted keys; every caller passes its own default so a
trimmed settings file still works:

    from config import get_config
    dpi = get_config("input.pdf.dpi", 300)

A handful of deployment settings can be set from the environment, see
ENV_OVERRIDES.
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

import yaml


CONFIG_DIR = Path(__file__).parent
PROJECT_ROOT = CONFIG_DIR.parent
DEFAULT_SETTINGS = CONFIG_DIR / "settings.yaml"

# env var -> (dotted key, converter)
ENV_OVERRIDES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "PACKSLIP_WEBHOOK_URL": ("webhook.url", str),
    "PACKSLIP_WEBHOOK_TIMEOUT": ("webhook.timeout", float),
    "PACKSLIP_LOG_LEVEL": ("logging.level", str.upper),
    "PACKSLIP_DB_PATH": ("storage.database_path", str),
    "PACKSLIP_MAX_PAGES": ("input.pdf.max_pages", int),
}


class ConfigurationManager:
    """
    Process-wide settings, loaded once from YAML.
    
    The first construction loads the file; later constructions return the
    same instance and ignore their argument until reset() is called.
    
    Example:
        >>> config = ConfigurationManager()
        >>> config.get("parser.max_items")
        200
        >>> config.section("webhook")["retries"]
        2
    """
    
    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}
    
    def __new__(cls, config_path: Optional[Union[str, Path]] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance
    
    def __init__(self, config_path: Optional[Union[str, Path]] = None) -> None:
        """
        Args:
            config_path: Settings file. Defaults to config/settings.yaml.
        """
        if self._initialized:
            return
        
        self.config_path = Path(config_path) if config_path else DEFAULT_SETTINGS
        self._load_config()
        self._initialized = True
    
    def _load_config(self) -> None:
        """
        Read the settings file, then resolve paths and apply the environment.
        
        Raises:
            FileNotFoundError: If the settings file doesn't exist.
            yaml.YAMLError: If it isn't valid YAML.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        
        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}
        
        self._resolve_paths()
        self._apply_env_overrides()
    
    def _resolve_paths(self) -> None:
        """Make relative ``paths.*`` entries absolute under the project root."""
        paths = self._config.get('paths')
        if not isinstance(paths, dict):
            return
        for key, value in paths.items():
            if value and not Path(value).is_absolute():
                paths[key] = str(PROJECT_ROOT / value)
    
    def _apply_env_overrides(self) -> None:
        for env_name, (key, convert) in ENV_OVERRIDES.items():
            raw = os.environ.get(env_name)
            if not raw:
                continue
            try:
                value = convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {env_name}: {raw!r}")
            self._set(key, value)
    
    def _set(self, key: str, value: Any) -> None:
        section = self._config
        *parents, leaf = key.split('.')
        for part in parents:
            if not isinstance(section.get(part), dict):
                section[part] = {}
            section = section[part]
        section[leaf] = value
    
    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key such as ``"input.pdf.dpi"``.
        
        Returns:
            The configured value, or default when any part of the key is
            missing.
        """
        value: Any = self._config
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value
    
    def section(self, key: str) -> Dict[str, Any]:
        """Return a copy of a mapping section, or an empty dict."""
        value = self.get(key)
        return dict(value) if isinstance(value, dict) else {}
    
    def get_all(self) -> Dict[str, Any]:
        return self._config.copy()
    
    def reload(self) -> None:
        """Re-read the settings file this instance was created with."""
        self._load_config()
    
    @classmethod
    def reset(cls) -> None:
        """Drop the loaded settings; the next construction reads them again."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ``ConfigurationManager().get(key, default)``."""
    return ConfigurationManager().get(key, default)


def config_file(key: str, default_name: str) -> Path:
    """
    Locate a data file named by a settings key.
    
    Relative names are taken from the config directory, so
    ``vendors.registry_file: vendors.yaml`` means config/vendors.yaml.
    """
    path = Path(get_config(key, default_name) or default_name)
    return path if path.is_absolute() else CONFIG_DIR / path


__all__ = ['ConfigurationManager', 'get_config', 'config_file', 'CONFIG_DIR', 'PROJECT_ROOT']
