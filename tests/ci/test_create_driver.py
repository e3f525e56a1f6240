import pytest
from pydantic import ValidationError
from pytest_httpserver import HTTPServer

from hub_driver import SeleniumHubDriver, W3CClient, create_driver
from hub_driver.exceptions import NoSuchElementError


class TestCreateDriver:
	async def test_builds_a_driver_with_the_configured_timeout(self, monkeypatch):
		monkeypatch.setenv('HUB_DRIVER_COMMAND_TIMEOUT', '12')

		async with create_driver() as driver:
			assert isinstance(driver, SeleniumHubDriver)
			assert isinstance(driver.hub_client, W3CClient)
			assert driver.timeout_interceptor.timeout == 12

	async def test_closes_its_http_client(self):
		driver = create_driver({'command': {'timeout': 5}})
		http_client = driver.hub_client.http_client

		await driver.aclose()

		assert http_client.is_closed

	async def test_applies_http_client_options(self):
		async with create_driver({'browser': {'headers': {'X-Test-Run': 'ci'}, 'timeout': 15}}) as driver:
			http_client = driver.hub_client.http_client

			assert http_client.headers['X-Test-Run'] == 'ci'
			assert http_client.timeout.read == 15

	def test_rejects_unknown_options(self):
		with pytest.raises(ValidationError):
			create_driver({'comand': {'timeout': 5}})

	async def test_end_to_end_against_fake_hub(self, httpserver: HTTPServer):
		httpserver.expect_request('/wd/hub/session', method='POST').respond_with_json({'value': {'sessionId': 'session-1'}})
		httpserver.expect_request(
			'/wd/hub/session/session-1/url', method='POST', json={'url': 'https://example.com'}
		).respond_with_json({'value': None})
		httpserver.expect_request('/wd/hub/session/session-1/element', method='POST').respond_with_json(
			{'value': {'error': 'no such element', 'message': 'Unable to locate element'}}, status=404
		)
		httpserver.expect_request('/wd/hub/session/session-1', method='DELETE').respond_with_json({'value': None})

		async with create_driver({'hub': {'host': httpserver.host, 'port': httpserver.port}, 'command': {'timeout': 5}}) as driver:
			session_id = await driver.create_session()
			await driver.open_uri(session_id, 'https://example.com')

			with pytest.raises(NoSuchElementError):
				await driver.get_element_identifier(session_id, '//h1')

			await driver.remove_session(session_id)

		assert session_id == 'session-1'
