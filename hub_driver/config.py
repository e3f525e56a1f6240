"""Configuration system for hub-driver: environment defaults plus validated option groups."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class FlatEnvConfig(BaseSettings):
	"""All environment variables in a flat namespace."""

	model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', case_sensitive=True, extra='allow')

	# Logging
	HUB_DRIVER_LOGGING_LEVEL: str = Field(default='info')

	# Selenium Grid endpoint
	HUB_DRIVER_HUB_HOST: str = Field(default='127.0.0.1')
	HUB_DRIVER_HUB_PORT: int = Field(default=4444)
	HUB_DRIVER_HUB_BASE_PATH: str = Field(default='/wd/hub')

	# Commands
	HUB_DRIVER_COMMAND_TIMEOUT: float = Field(default=30.0)

	# Sessions
	HUB_DRIVER_BROWSER_NAME: str = Field(default='chrome')


class Config:
	"""Configuration proxy that re-reads the environment on every attribute access."""

	def __getattr__(self, name: str) -> Any:
		if name.startswith('_'):
			raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")

		env_config = FlatEnvConfig()
		if name in FlatEnvConfig.model_fields:
			value = getattr(env_config, name)
			if name == 'HUB_DRIVER_LOGGING_LEVEL':
				return str(value).lower()
			return value

		raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")


# Create singleton instance
CONFIG = Config()


class HttpClientOptions(BaseModel):
	"""Options to customize the underlying HTTP client used to talk to the hub"""

	model_config = ConfigDict(extra='forbid')

	verify: bool = True
	local_address: str | None = None  # bind outgoing connections to this local IP, e.g. '192.168.56.10'
	timeout: float | None = None  # transport-level timeout, unrelated to command.timeout
	headers: dict[str, str] = Field(default_factory=dict)
	proxy: str | None = None


class HubServerOptions(BaseModel):
	"""Location of the Selenium Grid endpoint that receives the commands"""

	model_config = ConfigDict(extra='forbid')

	scheme: str = 'http'
	host: str = Field(default_factory=lambda: CONFIG.HUB_DRIVER_HUB_HOST)
	port: int = Field(default_factory=lambda: CONFIG.HUB_DRIVER_HUB_PORT, gt=0, lt=65536)
	base_path: str = Field(default_factory=lambda: CONFIG.HUB_DRIVER_HUB_BASE_PATH)

	@field_validator('base_path')
	@classmethod
	def _normalize_base_path(cls, value: str) -> str:
		value = value.strip().strip('/')
		return f'/{value}' if value else ''

	@property
	def url(self) -> str:
		return f'{self.scheme}://{self.host}:{self.port}{self.base_path}'


class CommandOptions(BaseModel):
	"""Options to control behavior of the commands executed on the remote server"""

	model_config = ConfigDict(extra='forbid')

	# Maximum time to wait (in seconds) for command execution, does not correlate with HTTP timeouts
	timeout: float = Field(default_factory=lambda: CONFIG.HUB_DRIVER_COMMAND_TIMEOUT, gt=0)


def _default_capabilities() -> dict[str, Any]:
	return {'browserName': CONFIG.HUB_DRIVER_BROWSER_NAME}


class SessionOptions(BaseModel):
	"""Capabilities requested when a new session is created"""

	model_config = ConfigDict(extra='forbid')

	capabilities: dict[str, Any] = Field(default_factory=_default_capabilities)


class DriverOptions(BaseModel):
	"""All option groups accepted by create_driver()"""

	model_config = ConfigDict(extra='forbid')

	browser: HttpClientOptions = Field(default_factory=HttpClientOptions)
	hub: HubServerOptions = Field(default_factory=HubServerOptions)
	command: CommandOptions = Field(default_factory=CommandOptions)
	session: SessionOptions = Field(default_factory=SessionOptions)


def load_driver_options(options: DriverOptions | dict[str, Any] | None = None) -> DriverOptions:
	"""Validate user-supplied options, filling the gaps from the environment."""
	if isinstance(options, DriverOptions):
		return options
	resolved = DriverOptions.model_validate(options or {})
	logger.debug(f'Resolved driver options: hub={resolved.hub.url} command.timeout={resolved.command.timeout}s')
	return resolved
