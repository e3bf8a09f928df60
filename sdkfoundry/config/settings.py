"""Configuration loader for SDKFoundry settings."""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_CONFIG = {
    'cache_dir': 'cache',
    'telemetry_file': 'telemetry.jsonl',
    'logging': {
        'level': 'INFO',
        'json': False,
        'file': None
    },
    'sdk': {
        'namespace': '@iwsdk',
        'packages': ['core', 'xr-input', 'glxf', 'locomotor'],
        'core_package': 'core',
        'source_extensions': ['.ts', '.tsx'],
        'component_factory': 'createComponent',
        'system_factory': 'createSystem',
        'system_suffix': 'System',
        'example_entry_files': ['index.js', 'index.ts', 'main.ts', 'main.js'],
        'repository': 'meta-quest/immersive-web-sdk',
        'default_version': '0.1.0'
    },
    'inference': {
        'optional_lower': 0.5,
        'optional_upper': 1.0,
        'composition_min_count': 2,
        'composition_min_share': 0.1
    },
    'docs': {
        'base_url': 'https://developers.meta.com/horizon/llmstxt/documentation/web',
        'timeout': 30,
        'min_length': 100,
        'user_agent': 'SDKFoundry/1.0'
    },
    'http': {
        'host': '127.0.0.1',
        'port': 8080
    }
}

# Environment variables that override single keys
ENV_OVERRIDES = {
    'SDKFOUNDRY_CACHE_DIR': 'cache_dir',
    'SDKFOUNDRY_TELEMETRY_FILE': 'telemetry_file',
    'SDKFOUNDRY_LOG_LEVEL': 'logging.level',
}


class Settings:
    """Settings manager backed by DEFAULT_CONFIG and an optional YAML file."""

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        self.config_path = config_path or self._get_default_config_path()
        self._overrides = overrides or {}
        self._config = self._load_config()

    def _get_default_config_path(self) -> Optional[str]:
        """Get the first existing configuration file path."""
        possible_paths = [
            os.environ.get('SDKFOUNDRY_CONFIG'),
            os.path.join(os.getcwd(), 'config', 'sdkfoundry.yaml'),
            os.path.join(os.path.expanduser('~'), '.sdkfoundry', 'config.yaml')
        ]

        for path in possible_paths:
            if path and os.path.exists(path):
                return path

        return None

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or use defaults."""
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path and os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    file_config = yaml.safe_load(f) or {}
                config = self._deep_merge(config, file_config)
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}; using defaults")
        else:
            logger.debug("No config file found, using defaults")

        for env_name, key in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                self._set(config, key, value)

        if self._overrides:
            config = self._deep_merge(config, self._overrides)

        return config

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _set(config: Dict[str, Any], key: str, value: Any) -> None:
        keys = key.split('.')
        target = config
        for k in keys[:-1]:
            target = target.setdefault(k, {})
        target[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key."""
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    @property
    def cache_dir(self) -> Path:
        return Path(self.get('cache_dir', 'cache'))

    @property
    def telemetry_file(self) -> Path:
        return Path(self.get('telemetry_file', 'telemetry.jsonl'))

    @property
    def namespace(self) -> str:
        return self.get('sdk.namespace', '@iwsdk')

    @property
    def packages(self) -> List[str]:
        return list(self.get('sdk.packages', []))

    def package_id(self, pkg: str) -> str:
        """Map a directory name under packages/ to its published package id."""
        return f"{self.namespace}/{pkg}"

    def package_ids(self) -> List[str]:
        return [self.package_id(pkg) for pkg in self.packages]

    def get_inference_thresholds(self) -> Dict[str, float]:
        """Get co-occurrence and composition thresholds."""
        return {
            'lower': self.get('inference.optional_lower', 0.5),
            'upper': self.get('inference.optional_upper', 1.0),
            'min_count': self.get('inference.composition_min_count', 2),
            'min_share': self.get('inference.composition_min_share', 0.1)
        }

    def reload(self):
        """Reload configuration from file."""
        self._config = self._load_config()


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
