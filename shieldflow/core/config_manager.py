"""
Configuration Manager for ShieldFlow settings
"""

import copy
import os
import yaml
from pathlib import Path
from typing import Optional, Dict, List, Any
import logging

from .constants import (
    CONNECT_DELAY, DISCONNECT_DELAY, TICK_INTERVAL, TRAFFIC_WINDOW,
    LOG_CAPACITY, GEMINI_MODEL, DEFAULT_SERVER_ID
)
from .types import Preferences, Server

logger = logging.getLogger(__name__)

API_KEY_ENV_VARS = ('GEMINI_API_KEY', 'API_KEY')


class ConfigManager:
    """Manage ShieldFlow settings and the optional server list"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager

        Args:
            config_dir: Directory for configuration files
        """
        if config_dir is None:
            self.config_dir = Path.home() / '.config' / 'shieldflow'
        else:
            self.config_dir = Path(config_dir)

        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Configuration file paths
        self.settings_file = self.config_dir / 'settings.yaml'
        self.servers_file = self.config_dir / 'servers.yaml'

        # Default settings
        self.default_settings = {
            'log_level': 'INFO',
            'log_file': str(self.config_dir / 'logs' / 'shieldflow.log'),
            'selected_server': DEFAULT_SERVER_ID,
            'preferences': Preferences().to_dict(),
            'simulation': {
                'connect_delay': CONNECT_DELAY,
                'disconnect_delay': DISCONNECT_DELAY,
                'tick_interval': TICK_INTERVAL,
                'traffic_window': TRAFFIC_WINDOW,
                'log_capacity': LOG_CAPACITY,
            },
            'recommendation': {
                'model': GEMINI_MODEL,
                'api_key': None,
                'default_server': DEFAULT_SERVER_ID,
            },
        }

        # Load or create settings
        self.settings = self.load_settings()

    def load_settings(self) -> Dict:
        """Load settings from file or create default"""
        if self.settings_file.exists():
            try:
                with open(self.settings_file, 'r') as f:
                    settings = yaml.safe_load(f) or {}

                if not isinstance(settings, dict):
                    raise ValueError("settings file must hold a mapping")

                # Merge with defaults to ensure all keys exist
                merged = self._deep_merge(self.default_settings, settings)
                logger.debug("Settings loaded successfully")
                return merged

            except Exception as e:
                logger.error(f"Failed to load settings: {e}")
                logger.info("Using default settings")
                return copy.deepcopy(self.default_settings)
        else:
            # Create default settings file
            self.save_settings(copy.deepcopy(self.default_settings))
            return copy.deepcopy(self.default_settings)

    def save_settings(self, settings: Optional[Dict] = None):
        """Save settings to file"""
        if settings is None:
            settings = self.settings

        try:
            with open(self.settings_file, 'w') as f:
                yaml.safe_dump(settings, f, default_flow_style=False, sort_keys=False)

            self.settings = settings
            logger.debug("Settings saved successfully")

        except Exception as e:
            logger.error(f"Failed to save settings: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get setting value using dot notation

        Args:
            key: Setting key (e.g., 'simulation.connect_delay')
            default: Default value if key not found
        """
        keys = key.split('.')
        value = self.settings

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """
        Set setting value using dot notation

        Args:
            key: Setting key (e.g., 'preferences.protocol')
            value: Value to set
        """
        keys = key.split('.')
        settings = self.settings

        for k in keys[:-1]:
            if not isinstance(settings.get(k), dict):
                settings[k] = {}
            settings = settings[k]

        settings[keys[-1]] = value
        self.save_settings()

    def load_preferences(self) -> Preferences:
        """Saved preferences, defaults when they are invalid"""
        try:
            return Preferences.from_dict(self.get('preferences'))
        except ValueError as e:
            logger.error(f"Invalid preferences in settings: {e}")
            return Preferences()

    def save_preferences(self, preferences: Preferences):
        self.set('preferences', preferences.to_dict())

    def get_api_key(self) -> Optional[str]:
        """API key from the environment, then from the settings file"""
        for name in API_KEY_ENV_VARS:
            value = os.environ.get(name)
            if value:
                return value
        return self.get('recommendation.api_key')

    def load_servers(self) -> List[Server]:
        """Load extra servers from servers.yaml"""
        if not self.servers_file.exists():
            return []

        try:
            with open(self.servers_file, 'r') as f:
                data = yaml.safe_load(f) or {}
            servers = [
                Server.from_config(entry)
                for entry in data.get('servers', [])
            ]
            logger.debug(f"Loaded {len(servers)} servers from {self.servers_file}")
            return servers
        except Exception as e:
            logger.error(f"Failed to load servers: {e}")
            return []

    @staticmethod
    def _deep_merge(base: Dict, update: Dict) -> Dict:
        """Deep merge two dictionaries"""
        result = copy.deepcopy(base)

        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigManager._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
