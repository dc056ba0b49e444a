# llmbatch/config/loader.py

import re
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ConfigLoader:
    """
    Loads and validates YAML configuration files for LLM Batch.

    Manages:
      - paths_config.yaml
      - model_config.yaml
      - retry_config.yaml
    """
    REQUIRED_PATHS_KEYS = ['general']
    REQUIRED_MODEL_CONFIG = ['backends']
    REQUIRED_RETRY_KEYS = ['retry']

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self.config_dir = config_dir or Path(__file__).resolve().parents[2] / 'config'
        self.paths_config: Optional[Dict[str, Any]] = None
        self.model_config: Optional[Dict[str, Any]] = None
        self.retry_config: Optional[Dict[str, Any]] = None

    def load_configs(self) -> None:
        """
        Load and validate the configuration files.
        """
        self.paths_config = self._load_yaml('paths_config.yaml')
        self.model_config = self._load_yaml('model_config.yaml')
        self.retry_config = self._load_yaml('retry_config.yaml')

        self._validate_config(self.paths_config, self.REQUIRED_PATHS_KEYS, 'paths_config.yaml')
        self._resolve_paths(self.paths_config)
        self._validate_config(self.model_config, self.REQUIRED_MODEL_CONFIG, 'model_config.yaml')
        self._validate_config(self.retry_config, self.REQUIRED_RETRY_KEYS, 'retry_config.yaml')
        logger.info("All configurations loaded and validated successfully.")

    def _load_yaml(self, filename: str) -> Dict[str, Any]:
        """
        Load a YAML file and return its content as a dictionary.

        :param filename: The name of the YAML file.
        :return: Parsed YAML content.
        :raises FileNotFoundError: If the file is missing.
        """
        config_path = self.config_dir / filename
        if not config_path.exists():
            logger.error(f"Configuration file not found: {config_path}")
            raise FileNotFoundError(f"Missing configuration file: {config_path}")

        with config_path.open('r', encoding='utf-8') as f:
            content = f.read()
            try:
                # Normalize Windows paths in paths_config.yaml
                if filename == 'paths_config.yaml':
                    content = re.sub(
                        r'"([^"]*)"',
                        lambda m: '"' + m.group(1).replace('\\', '/') + '"',
                        content
                    )
                return yaml.safe_load(content) or {}
            except yaml.YAMLError as e:
                logger.error(f"Error parsing YAML file {filename}: {e}")
                raise

    def _validate_config(self, config: Dict[str, Any], required_keys: list, config_name: str) -> None:
        """
        Validate configuration for required keys.

        :param config: The configuration dictionary.
        :param required_keys: List of required keys.
        :param config_name: Name of the configuration file.
        :raises KeyError: If a required key is missing.
        """
        for key in required_keys:
            if key not in config:
                error_msg = f"Missing '{key}' in {config_name}"
                logger.error(error_msg)
                raise KeyError(error_msg)

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """
        Resolve relative paths in configuration if enabled.

        :param config: The paths configuration dictionary.
        """
        general = config.get("general", {})
        allow_relative_paths = general.get("allow_relative_paths", False)

        if not allow_relative_paths:
            return

        base_directory = general.get("base_directory", ".")
        base_path = Path(base_directory).resolve()

        if not base_path.exists():
            logger.warning(
                f"Base directory '{base_directory}' does not exist. Using current directory.")
            base_path = Path.cwd()

        for path_key in ("logs_dir", "output_dir"):
            raw = general.get(path_key)
            if raw and not Path(raw).is_absolute():
                general[path_key] = str((base_path / raw).resolve())
                logger.info(f"Resolved {path_key} to: {general[path_key]}")

    def get_paths_config(self) -> Dict[str, Any]:
        """
        Get the loaded paths configuration.

        :return: The paths configuration dictionary.
        """
        return self.paths_config  # type: ignore

    def get_model_config(self) -> Dict[str, Any]:
        """
        Get the loaded model configuration.

        :return: The model configuration dictionary.
        """
        return self.model_config  # type: ignore

    def get_retry_config(self) -> Dict[str, Any]:
        """
        Get the loaded retry configuration.

        :return: The retry configuration dictionary.
        """
        return self.retry_config  # type: ignore

    def get_backend_config(self, identifier: str) -> Dict[str, Any]:
        """
        Get the raw settings block for one backend identifier.

        :return: The backend's settings, or an empty dict when not configured.
        """
        backends = (self.model_config or {}).get("backends", {}) or {}
        return backends.get(identifier, {}) or {}


_config_cache: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Return a process-wide ConfigLoader, loading the YAML files on first use."""
    global _config_cache
    if _config_cache is None:
        loader = ConfigLoader()
        loader.load_configs()
        _config_cache = loader
    return _config_cache


def clear_config_cache() -> None:
    """Drop the cached loader so the next call re-reads the configuration."""
    global _config_cache
    _config_cache = None
