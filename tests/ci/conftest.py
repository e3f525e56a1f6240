"""
Pytest configuration for hub-driver CI tests.

Sets up environment variables to ensure tests never connect to a real Selenium hub.
"""

import asyncio
import os
from collections.abc import Awaitable, Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest
from dotenv import load_dotenv

# Load environment variables before any imports
load_dotenv()

from hub_driver import SeleniumHubDriver, TimeoutInterceptor, W3CClient
from hub_driver.client.views import ElementReference


@pytest.fixture(autouse=True)
def setup_test_environment():
	"""
	Automatically set up test environment for all tests.
	"""

	original_env = {}
	test_env_vars = {
		'HUB_DRIVER_LOGGING_LEVEL': 'debug',
		'HUB_DRIVER_HUB_HOST': '127.0.0.1',
		'HUB_DRIVER_HUB_PORT': '4444',
		'HUB_DRIVER_HUB_BASE_PATH': '/wd/hub',
		'HUB_DRIVER_COMMAND_TIMEOUT': '30',
		'HUB_DRIVER_BROWSER_NAME': 'chrome',
	}

	for key, value in test_env_vars.items():
		original_env[key] = os.environ.get(key)
		os.environ[key] = value

	yield

	# Restore original environment
	for key, value in original_env.items():
		if value is None:
			os.environ.pop(key, None)
		else:
			os.environ[key] = value


# not a fixture, used as an AsyncMock side_effect to make a hub command take some time
def delayed(value: Any = None, delay: float = 0.0, exception: BaseException | None = None) -> Callable[..., Awaitable[Any]]:
	"""Create an async side effect that sleeps for `delay` seconds, then returns `value` or raises `exception`."""

	async def side_effect(*args: Any, **kwargs: Any) -> Any:
		await asyncio.sleep(delay)
		if exception is not None:
			raise exception
		return value

	return side_effect


# not a fixture, mock_hub_client() provides this in a fixture below, this is a helper so that it can accept args
def create_mock_hub_client(**return_values: Any) -> AsyncMock:
	"""Create a mock hub client with every command answering immediately.

	Args:
		return_values: Optional return values per command name, e.g. get_source='<html></html>'

	Returns:
		AsyncMock shaped like W3CClient.
	"""
	client = AsyncMock(spec=W3CClient)
	client.create_session.return_value = 'session-1'
	client.get_session_identifiers.return_value = ['session-1']
	client.remove_session.return_value = None
	client.get_tab_identifiers.return_value = ['tab-1', 'tab-2']
	client.get_active_tab_identifier.return_value = 'tab-1'
	client.set_active_tab.return_value = None
	client.open_uri.return_value = None
	client.get_current_uri.return_value = 'https://example.com/'
	client.get_source.return_value = '<html><body><h1>Example</h1></body></html>'
	client.get_element_identifier.return_value = ElementReference(element_id='element-1')
	client.get_active_element_identifier.return_value = ElementReference(element_id='element-2')
	client.get_element_visibility.return_value = True
	client.click_element.return_value = None
	client.keypress_element.return_value = None
	client.mouse_move.return_value = None
	client.mouse_left_click.return_value = None
	client.get_screenshot.return_value = b'\x89PNG\r\n\x1a\nfake'
	client.aclose.return_value = None

	for name, value in return_values.items():
		getattr(client, name).return_value = value

	return client


@pytest.fixture
def mock_hub_client() -> AsyncMock:
	return create_mock_hub_client()


@pytest.fixture
def driver(mock_hub_client) -> SeleniumHubDriver:
	"""Driver over a mock hub client with a short command timeout."""
	return SeleniumHubDriver(mock_hub_client, TimeoutInterceptor(1.0))


@pytest.fixture
async def hub_client(httpserver):
	"""W3C client pointed at the pytest-httpserver fake hub."""
	client = W3CClient(hub={'host': httpserver.host, 'port': httpserver.port, 'base_path': '/wd/hub'})
	yield client
	await client.aclose()


@pytest.fixture
def element() -> ElementReference:
	return ElementReference(element_id='element-1')
