"""
Configuration loader for docvid

Handles loading and merging of YAML configuration files with environment variable overrides.
"""

import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "DOCVID_"


class ConfigLoader:
    """
    Loads and manages configuration from YAML files with cascading priority:
    1. Default configuration (docvid/config/default.yaml)
    2. User configuration (config/config.yaml at project root, or $DOCVID_CONFIG)
    3. Environment variable overrides (DOCVID_SECTION_KEY format)
    """

    def __init__(self, user_config_path: Optional[str] = None):
        """
        Initialize configuration loader

        Args:
            user_config_path: Path to user config file (default: config/config.yaml at project root)
        """
        self.package_dir = Path(__file__).parent
        self.default_config_path = self.package_dir / "default.yaml"

        if user_config_path:
            self.user_config_path = Path(user_config_path)
        elif os.environ.get("DOCVID_CONFIG"):
            self.user_config_path = Path(os.environ["DOCVID_CONFIG"])
        else:
            # docvid/config/ -> project root -> config/
            project_root = self.package_dir.parent.parent
            self.user_config_path = project_root / "config" / "config.yaml"

        # Files and DOCVID_* variables that contributed to the last load
        self.sources: List[str] = []
        self.overridden_keys: List[str] = []
        self.config = self._load_config()

    def _load_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML file and return as dictionary"""
        try:
            if not file_path.exists():
                logger.debug(f"Config file not found: {file_path}")
                return {}

            with open(file_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
                if config is None:
                    return {}
                return config
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Error loading config from {file_path}: {e}")
            return {}

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recursively merge two configuration dictionaries

        Args:
            base: Base configuration
            override: Configuration to merge on top

        Returns:
            Merged configuration
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _parse_env_value(env_value: str) -> Any:
        """Parse an environment string as int, float, bool, or keep it as a string"""
        try:
            if '.' in env_value:
                return float(env_value)
            return int(env_value)
        except ValueError:
            pass

        if env_value.lower() in ('true', 'yes'):
            return True
        if env_value.lower() in ('false', 'no'):
            return False
        return env_value

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration

        Environment variables use the format DOCVID_SECTION_KEY, where the
        first underscore-separated part names the section and the rest
        names the key inside it.
        Example: DOCVID_TEXT_WRAP_WIDTH=50 -> text.wrap_width = 50

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with environment overrides applied
        """
        result = self._merge_configs({}, config)

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX) or env_key == "DOCVID_CONFIG":
                continue

            parts = env_key[len(ENV_PREFIX):].lower().split('_', 1)
            if len(parts) < 2 or not parts[1]:
                continue

            section, key = parts
            current = result.setdefault(section, {})
            if not isinstance(current, dict):
                logger.warning(f"Cannot apply {env_key}: '{section}' is not a section")
                continue

            current[key] = self._parse_env_value(env_value)
            self.overridden_keys.append(f"{section}.{key}")
            logger.debug(f"Applied env override: {env_key} = {env_value}")

        return result

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration with cascading priority

        Returns:
            Merged configuration dictionary
        """
        logger.debug(f"Loading default config from: {self.default_config_path}")
        self.sources = []
        self.overridden_keys = []
        config = self._load_yaml(self.default_config_path)
        self.sources.append(str(self.default_config_path))

        if self.user_config_path.exists():
            logger.info(f"Loading user config from: {self.user_config_path}")
            user_config = self._load_yaml(self.user_config_path)
            config = self._merge_configs(config, user_config)
            self.sources.append(str(self.user_config_path))
        else:
            logger.debug(f"No user config found at: {self.user_config_path}")

        config = self._apply_env_overrides(config)

        return config

    def get(self, *keys, default: Any = None) -> Any:
        """
        Get configuration value using dot notation or multiple keys

        Args:
            *keys: Configuration keys (e.g., 'text', 'wrap_width' or 'text.wrap_width')
            default: Default value if key not found

        Returns:
            Configuration value or default

        Examples:
            config.get('text', 'wrap_width')
            config.get('layout.font_size')
            config.get('processing', 'ffmpeg_binary', default='ffmpeg')
        """
        if len(keys) == 1 and isinstance(keys[0], str) and '.' in keys[0]:
            keys = keys[0].split('.')

        current = self.config
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section

        Args:
            section: Section name (e.g., 'upload', 'layout')

        Returns:
            Section dictionary or empty dict if not found
        """
        return self.get(section, default={})

    def reload(self) -> None:
        """Reload configuration from files"""
        self.config = self._load_config()
        logger.info("Configuration reloaded")

    def __repr__(self) -> str:
        return f"ConfigLoader(default={self.default_config_path}, user={self.user_config_path})"
