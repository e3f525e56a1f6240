import asyncio
import logging
from typing import Any

import httpx

from hub_driver.client.w3c import W3CClient
from hub_driver.config import DriverOptions, HttpClientOptions, load_driver_options
from hub_driver.driver.service import SeleniumHubDriver
from hub_driver.timeout import TimeoutInterceptor

logger = logging.getLogger(__name__)


def create_http_client(options: HttpClientOptions) -> httpx.AsyncClient:
	"""Builds the HTTP client used to send commands to the hub"""
	transport = httpx.AsyncHTTPTransport(
		verify=options.verify,
		local_address=options.local_address,
		proxy=options.proxy,
	)
	# timeout=None disables transport timeouts, commands are bounded by command.timeout instead
	return httpx.AsyncClient(transport=transport, headers=options.headers, timeout=options.timeout)


def create_driver(
	options: DriverOptions | dict[str, Any] | None = None,
	loop: asyncio.AbstractEventLoop | None = None,
) -> SeleniumHubDriver:
	"""
	Creates and returns a new web driver instance.

	Usage example:
		driver = create_driver(
			{
				'browser': {'verify': False, 'local_address': '192.168.56.10'},
				'hub': {'host': 'selenium-hub', 'port': 4444},
				'command': {'timeout': 30},
			}
		)
		async with driver:
			session_id = await driver.create_session()

	The "command.timeout" option doesn't correlate with the HTTP client timeouts ("browser.timeout"):
	it just stops waiting for a command after the specified time (in seconds). The HTTP request
	itself may (or may not) be completed by the hub.

	Raises:
		pydantic.ValidationError: Whenever an option is unknown or has an invalid value
	"""
	resolved = load_driver_options(options)

	http_client = create_http_client(resolved.browser)
	hub_client = W3CClient(http_client, hub=resolved.hub, session=resolved.session, owns_http_client=True)
	timeout_interceptor = TimeoutInterceptor(resolved.command.timeout, loop=loop)

	driver = SeleniumHubDriver(hub_client, timeout_interceptor, loop=loop, owns_client=True)
	logger.debug(f'Created {driver} (command timeout {resolved.command.timeout:g}s)')
	return driver
