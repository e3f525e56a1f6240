import base64
import binascii
import logging
from typing import Any, Self, TypeVar
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from hub_driver.client.views import ElementReference, W3CErrorValue, W3CResponse
from hub_driver.config import HubServerOptions, SessionOptions
from hub_driver.exceptions import HubRequestError, HubResponseError, WebDriverCommandError, error_for_w3c_code
from hub_driver.utils import _log_pretty_url, time_execution_async

T = TypeVar('T')

JSON_HEADERS = {'Content-Type': 'application/json; charset=UTF-8'}


class W3CClient:
	"""
	W3C compliant WebDriver client for the Selenium Grid server (hub), using httpx.AsyncClient.

	It isn't a complete bridge and gives only the most common levers to get the job done, see
	HubClient. There are no timeouts on this level (except the transport ones configured on the
	http client): use SeleniumHubDriver to bound command execution time.

	Usage example:
		async with W3CClient(hub={'host': 'selenium-hub', 'port': 4444}) as client:
			session_id = await client.create_session()
			await client.open_uri(session_id, 'https://example.com')

	The hub sends some valid responses with 5xx status codes, so the client never raises on the
	status code alone: the body is parsed first and a W3C error payload is converted into a
	WebDriverCommandError subclass.
	"""

	def __init__(
		self,
		http_client: httpx.AsyncClient | None = None,
		hub: HubServerOptions | dict[str, Any] | None = None,
		session: SessionOptions | dict[str, Any] | None = None,
		owns_http_client: bool = False,
	):
		self.hub = hub if isinstance(hub, HubServerOptions) else HubServerOptions.model_validate(hub or {})
		self.session_options = session if isinstance(session, SessionOptions) else SessionOptions.model_validate(session or {})

		# If no client provided, we create (and own) one
		self._owns_http_client = owns_http_client or http_client is None
		self.http_client = http_client or httpx.AsyncClient()

		self._logger: logging.Logger | None = None

	def __str__(self) -> str:
		return f'W3CClient🌐 {self.hub.host}:{self.hub.port}'

	def __repr__(self) -> str:
		return f'W3CClient(url={self.hub.url!r})'

	@property
	def logger(self) -> logging.Logger:
		"""Get instance-specific logger with the hub address in the name"""
		if self._logger is None:
			self._logger = logging.getLogger(f'hub_driver.{self}')
		return self._logger

	async def __aenter__(self) -> Self:
		return self

	async def __aexit__(self, *exc_info: Any) -> None:
		await self.aclose()

	async def aclose(self) -> None:
		if self._owns_http_client and not self.http_client.is_closed:
			await self.http_client.aclose()

	# --- Sessions ---------------------------------------------------------------------------

	@time_execution_async('--get_session_identifiers')
	async def get_session_identifiers(self) -> list[str]:
		action = 'get selenium hub sessions'
		response = await self._execute('GET', ['sessions'], action=action)
		sessions = self._expect(response.value, list, action)

		identifiers = []
		for session in sessions:
			session_id = session.get('id') if isinstance(session, dict) else session
			if not isinstance(session_id, str):
				raise HubResponseError(f'Unable to {action} (response deserialization): unexpected entry {session!r}.')
			identifiers.append(session_id)
		return identifiers

	@time_execution_async('--create_session')
	async def create_session(self) -> str:
		action = 'open a selenium hub session'
		capabilities = self.session_options.capabilities
		payload = {
			'capabilities': {'firstMatch': [capabilities]},
			'desiredCapabilities': capabilities,
		}
		response = await self._execute('POST', ['session'], payload, action=action)

		session_id = response.session_id
		if isinstance(response.value, dict) and isinstance(response.value.get('sessionId'), str):
			session_id = response.value['sessionId']
		if not session_id:
			raise HubResponseError(
				f'Unable to {action} (response deserialization): unable to locate session identifier in the response.'
			)

		self.logger.debug(f'🆕 Opened hub session {session_id}')
		return session_id

	@time_execution_async('--remove_session')
	async def remove_session(self, session_id: str) -> None:
		await self._execute('DELETE', ['session', session_id], action='close a selenium hub session')
		self.logger.debug(f'🛑 Closed hub session {session_id}')

	# --- Tabs -------------------------------------------------------------------------------

	async def get_tab_identifiers(self, session_id: str) -> list[str]:
		action = 'get tab identifiers'
		response = await self._execute('GET', ['session', session_id, 'window', 'handles'], action=action)
		handles = self._expect(response.value, list, action)
		if not all(isinstance(handle, str) for handle in handles):
			raise HubResponseError(f'Unable to {action} (response deserialization): unexpected handles {handles!r}.')
		return handles

	async def get_active_tab_identifier(self, session_id: str) -> str:
		action = 'get active tab identifier'
		response = await self._execute('GET', ['session', session_id, 'window'], action=action)
		return self._expect(response.value, str, action)

	async def set_active_tab(self, session_id: str, tab_id: str) -> None:
		await self._execute('POST', ['session', session_id, 'window'], {'handle': tab_id}, action='switch active tab')

	# --- Navigation -------------------------------------------------------------------------

	@time_execution_async('--open_uri')
	async def open_uri(self, session_id: str, uri: str) -> None:
		await self._execute('POST', ['session', session_id, 'url'], {'url': uri}, action='open uri')

	async def get_current_uri(self, session_id: str) -> str:
		action = 'get current uri'
		response = await self._execute('GET', ['session', session_id, 'url'], action=action)
		return self._expect(response.value, str, action)

	@time_execution_async('--get_source')
	async def get_source(self, session_id: str) -> str:
		action = 'get page source'
		response = await self._execute('GET', ['session', session_id, 'source'], action=action)
		return self._expect(response.value, str, action)

	# --- Elements ---------------------------------------------------------------------------

	async def get_element_identifier(self, session_id: str, xpath_query: str) -> ElementReference:
		action = 'find element'
		payload = {'using': 'xpath', 'value': xpath_query}
		response = await self._execute('POST', ['session', session_id, 'element'], payload, action=action)
		return self._element(response.value, action)

	async def get_active_element_identifier(self, session_id: str) -> ElementReference:
		action = 'get active element'
		response = await self._execute('GET', ['session', session_id, 'element', 'active'], action=action)
		return self._element(response.value, action)

	async def get_element_visibility(self, session_id: str, element: ElementReference) -> bool:
		action = 'get element visibility'
		response = await self._execute(
			'GET', ['session', session_id, 'element', element.element_id, 'displayed'], action=action
		)
		return self._expect(response.value, bool, action)

	async def click_element(self, session_id: str, element: ElementReference) -> None:
		await self._execute('POST', ['session', session_id, 'element', element.element_id, 'click'], {}, action='click element')

	async def keypress_element(self, session_id: str, element: ElementReference, key_sequence: str) -> None:
		# "value" is kept for nodes that still speak the JSON wire protocol
		payload = {'text': key_sequence, 'value': list(key_sequence)}
		await self._execute(
			'POST', ['session', session_id, 'element', element.element_id, 'value'], payload, action='send keys to element'
		)

	# --- Pointer ----------------------------------------------------------------------------

	async def mouse_move(
		self,
		session_id: str,
		offset_x: int,
		offset_y: int,
		move_duration: int = 100,
		starting_point: ElementReference | None = None,
	) -> None:
		origin: str | dict[str, str] = starting_point.to_w3c() if starting_point is not None else 'pointer'
		move_action = {
			'type': 'pointerMove',
			'duration': move_duration,
			'origin': origin,
			'x': offset_x,
			'y': offset_y,
		}
		await self._perform_pointer_actions(session_id, [move_action], action='move mouse')

	async def mouse_left_click(self, session_id: str) -> None:
		click_actions = [
			{'type': 'pointerDown', 'button': 0},
			{'type': 'pointerUp', 'button': 0},
		]
		await self._perform_pointer_actions(session_id, click_actions, action='click mouse')

	async def _perform_pointer_actions(self, session_id: str, pointer_actions: list[dict[str, Any]], action: str) -> None:
		payload = {
			'actions': [
				{
					'type': 'pointer',
					'id': 'mouse',
					'parameters': {'pointerType': 'mouse'},
					'actions': pointer_actions,
				}
			]
		}
		await self._execute('POST', ['session', session_id, 'actions'], payload, action=action)

	# --- Screenshots ------------------------------------------------------------------------

	@time_execution_async('--get_screenshot')
	async def get_screenshot(self, session_id: str) -> bytes:
		action = 'take a screenshot'
		response = await self._execute('GET', ['session', session_id, 'screenshot'], action=action)
		encoded = self._expect(response.value, str, action)
		try:
			return base64.b64decode(encoded, validate=True)
		except binascii.Error as e:
			raise HubResponseError(f'Unable to {action} (response deserialization): invalid base64 image data.') from e

	# --- Transport --------------------------------------------------------------------------

	def _url(self, *path: str) -> str:
		return '/'.join([self.hub.url, *(quote(part, safe='') for part in path)])

	async def _execute(
		self,
		method: str,
		path: list[str],
		payload: dict[str, Any] | None = None,
		*,
		action: str,
	) -> W3CResponse:
		url = self._url(*path)
		self.logger.debug(f'➡️ {method} {_log_pretty_url(url, max_len=None)}')

		try:
			response = await self.http_client.request(
				method,
				url,
				json=payload,
				headers=JSON_HEADERS if payload is not None else None,
			)
		except httpx.HTTPError as e:
			raise HubRequestError(f'Unable to {action} (request): {type(e).__name__}: {e}') from e

		return self._parse_response(response, action)

	def _parse_response(self, response: httpx.Response, action: str) -> W3CResponse:
		try:
			body = W3CResponse.model_validate_json(response.content) if response.content else W3CResponse()
		except ValidationError as e:
			raise HubResponseError(
				f'Unable to {action} (response deserialization): HTTP {response.status_code} with a non-JSON body.'
			) from e

		if body.is_error:
			try:
				error = W3CErrorValue.model_validate(body.value)
			except ValidationError as e:
				raise HubResponseError(f'Unable to {action} (response deserialization): malformed error payload.') from e

			error_class = error_for_w3c_code(error.error)
			details = f'{error.error}: {error.message}' if error.message else error.error
			raise error_class(
				f'Unable to {action}: {details}',
				error=error.error,
				status_code=response.status_code,
			)

		if response.status_code >= 400:
			raise WebDriverCommandError(
				f'Unable to {action}: unexpected HTTP {response.status_code} response.',
				status_code=response.status_code,
			)

		return body

	@staticmethod
	def _expect(value: Any, expected_type: type[T], action: str) -> T:
		if not isinstance(value, expected_type):
			raise HubResponseError(
				f'Unable to {action} (response deserialization): expected {expected_type.__name__}, got {type(value).__name__}.'
			)
		return value

	@staticmethod
	def _element(value: Any, action: str) -> ElementReference:
		try:
			return ElementReference.from_w3c(value)
		except ValueError as e:
			raise HubResponseError(f'Unable to {action} (response deserialization): {e}') from e
