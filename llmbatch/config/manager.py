# llmbatch/config/manager.py

from pathlib import Path
from typing import Any, Dict, Optional
import logging

from pydantic import BaseModel, Field, ValidationError

from llmbatch.core.errors import ConfigValidationError

logger = logging.getLogger(__name__)


class BackendSettings(BaseModel):
	"""Fixed generation settings for one backend variant."""

	model: str = ""
	base_url: Optional[str] = None
	temperature: float = 0.2
	top_k: int = Field(default=16, ge=1)
	max_output_tokens: int = Field(default=10000, ge=1)
	timeout: float = Field(default=600.0, gt=0)
	slot_id: int = Field(default=0, ge=0)
	max_retries: int = Field(default=0, ge=0)


class RetrySettings(BaseModel):
	"""Backoff settings for busy failures. Caps are disabled when None."""

	initial_wait_ms: int = Field(default=100, ge=0)
	max_wait_ms: Optional[int] = Field(default=None, ge=0)
	max_attempts: Optional[int] = Field(default=None, ge=1)


class ConfigManager:
	"""
	Handles configuration validation and conversion into typed settings.
	"""

	def __init__(self, config_loader):
		"""Initialize with a ConfigLoader instance"""
		self.config_loader = config_loader

	def get_backend_settings(self, identifier: str) -> BackendSettings:
		"""
		Build validated settings for a backend.

		:param identifier: Backend identifier (key under 'backends' in model_config.yaml)
		:return: BackendSettings for the identifier (defaults when not configured)
		:raises ConfigValidationError: If the configured values are invalid
		"""
		raw = self.config_loader.get_backend_config(identifier)
		try:
			return BackendSettings(**raw)
		except (ValidationError, TypeError) as e:
			logger.error(f"Invalid settings for backend '{identifier}': {e}")
			raise ConfigValidationError(f"Invalid settings for backend '{identifier}': {e}") from e

	def get_retry_settings(self) -> RetrySettings:
		"""
		Build validated retry settings from retry_config.yaml.

		:return: RetrySettings
		:raises ConfigValidationError: If the configured values are invalid
		"""
		raw = (self.config_loader.get_retry_config() or {}).get("retry", {}) or {}
		try:
			return RetrySettings(**raw)
		except (ValidationError, TypeError) as e:
			logger.error(f"Invalid retry settings: {e}")
			raise ConfigValidationError(f"Invalid retry settings: {e}") from e

	def get_default_backend(self) -> Optional[str]:
		"""Return general.default_backend from paths_config.yaml, if set."""
		general = (self.config_loader.get_paths_config() or {}).get("general", {}) or {}
		return general.get("default_backend")

	def get_output_dir(self) -> Optional[Path]:
		"""
		Return the configured output directory.

		If allow_relative_paths is disabled the path must be absolute.

		:raises ConfigValidationError: If a relative path is configured without allow_relative_paths
		"""
		general = (self.config_loader.get_paths_config() or {}).get("general", {}) or {}
		output_dir = general.get("output_dir")
		if not output_dir:
			return None
		path = Path(output_dir)
		if not path.is_absolute() and not general.get("allow_relative_paths", False):
			raise ConfigValidationError(
				f"The 'output_dir' path '{output_dir}' is not absolute. "
				f"Please use an absolute path or enable allow_relative_paths in paths_config.yaml."
			)
		return path
