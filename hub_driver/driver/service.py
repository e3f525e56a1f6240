import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Self, TypeVar

import anyio

from hub_driver.client.base import HubClient
from hub_driver.client.views import ElementReference
from hub_driver.exceptions import ScreenshotSaveError
from hub_driver.routine import ConditionCheckRoutine
from hub_driver.timeout import TimeoutInterceptor
from hub_driver.utils import _log_pretty_path, settle_result

T = TypeVar('T')


class SeleniumHubDriver:
	"""
	Sends action requests to the Selenium Grid server (hub) and controls their async execution.

	Action methods are plain functions: the command is dispatched as soon as the method is called,
	and the returned asyncio.Future is bounded by the command timeout of `timeout_interceptor`.

	Usage example:
		session_id = await driver.create_session()
		await driver.open_uri(session_id, 'https://example.com')
		element = await driver.wait_until(lambda: driver.get_element_identifier(session_id, '//h1'), time=10)
		await driver.save_screenshot(session_id, './example.png')

	A timed out command is not cancelled on the hub side: the driver only stops waiting for it.
	"""

	def __init__(
		self,
		hub_client: HubClient,
		timeout_interceptor: TimeoutInterceptor,
		loop: asyncio.AbstractEventLoop | None = None,
		owns_client: bool = False,
	):
		self.hub_client = hub_client
		self.timeout_interceptor = timeout_interceptor
		self._loop = loop
		self._owns_client = owns_client
		self._logger: logging.Logger | None = None

	def __str__(self) -> str:
		return f'SeleniumHubDriver🚦 {self.hub_client}'

	@property
	def loop(self) -> asyncio.AbstractEventLoop:
		return self._loop or asyncio.get_running_loop()

	@property
	def logger(self) -> logging.Logger:
		if self._logger is None:
			self._logger = logging.getLogger(f'hub_driver.{self}')
		return self._logger

	async def __aenter__(self) -> Self:
		return self

	async def __aexit__(self, *exc_info: Any) -> None:
		await self.aclose()

	async def aclose(self) -> None:
		"""Closes the hub client (and its HTTP connections) if the driver owns it"""
		if self._owns_client:
			await self.hub_client.aclose()

	def _apply_timeout(self, operation: Awaitable[T], rejection_message: str) -> asyncio.Future[T]:
		return self.timeout_interceptor.apply_timeout(operation, rejection_message)

	# --- Sessions ---------------------------------------------------------------------------

	def create_session(self) -> asyncio.Future[str]:
		"""Resolves to the identifier of a session that has been started by the remote WebDriver service"""
		session_id_request = self.hub_client.create_session()

		return self._apply_timeout(session_id_request, 'Unable to complete a session create command.')

	def get_session_identifiers(self) -> asyncio.Future[list[str]]:
		"""Resolves to identifiers of the sessions which are available for command execution"""
		session_ids_request = self.hub_client.get_session_identifiers()

		return self._apply_timeout(session_ids_request, 'Unable to complete a session list command.')

	def remove_session(self, session_id: str) -> asyncio.Future[None]:
		"""Resolves when the remote WebDriver service confirms the closed session"""
		removal_request = self.hub_client.remove_session(session_id)

		return self._apply_timeout(removal_request, 'Unable to complete a session remove command.')

	# --- Tabs -------------------------------------------------------------------------------

	def get_tab_identifiers(self, session_id: str) -> asyncio.Future[list[str]]:
		tab_ids_request = self.hub_client.get_tab_identifiers(session_id)

		return self._apply_timeout(tab_ids_request, 'Unable to complete a tab lookup command.')

	def get_active_tab_identifier(self, session_id: str) -> asyncio.Future[str]:
		tab_id_request = self.hub_client.get_active_tab_identifier(session_id)

		return self._apply_timeout(tab_id_request, 'Unable to complete a get active tab command.')

	def set_active_tab(self, session_id: str, tab_id: str) -> asyncio.Future[None]:
		switch_confirmation_request = self.hub_client.set_active_tab(session_id, tab_id)

		return self._apply_timeout(switch_confirmation_request, 'Unable to complete a set active tab command.')

	# --- Navigation -------------------------------------------------------------------------

	def open_uri(self, session_id: str, uri: str) -> asyncio.Future[None]:
		navigation_request = self.hub_client.open_uri(session_id, uri)

		return self._apply_timeout(navigation_request, 'Unable to complete an open URI command.')

	def get_current_uri(self, session_id: str) -> asyncio.Future[str]:
		current_uri_request = self.hub_client.get_current_uri(session_id)

		return self._apply_timeout(current_uri_request, 'Unable to complete a get current uri command.')

	def get_source(self, session_id: str) -> asyncio.Future[str]:
		source_code_request = self.hub_client.get_source(session_id)

		return self._apply_timeout(source_code_request, 'Unable to complete a get source command.')

	# --- Elements ---------------------------------------------------------------------------

	def get_element_identifier(self, session_id: str, xpath_query: str) -> asyncio.Future[ElementReference]:
		element_request = self.hub_client.get_element_identifier(session_id, xpath_query)

		return self._apply_timeout(element_request, 'Unable to complete a get element identifier command.')

	def get_active_element_identifier(self, session_id: str) -> asyncio.Future[ElementReference]:
		element_request = self.hub_client.get_active_element_identifier(session_id)

		return self._apply_timeout(element_request, 'Unable to complete a get active element identifier command.')

	def get_element_visibility(self, session_id: str, element: ElementReference) -> asyncio.Future[bool]:
		visibility_status_request = self.hub_client.get_element_visibility(session_id, element)

		return self._apply_timeout(visibility_status_request, 'Unable to complete a get element visibility command.')

	def click_element(self, session_id: str, element: ElementReference) -> asyncio.Future[None]:
		click_confirmation_request = self.hub_client.click_element(session_id, element)

		return self._apply_timeout(click_confirmation_request, 'Unable to complete a click element command.')

	def keypress_element(self, session_id: str, element: ElementReference, key_sequence: str) -> asyncio.Future[None]:
		keypress_confirmation_request = self.hub_client.keypress_element(session_id, element, key_sequence)

		return self._apply_timeout(keypress_confirmation_request, 'Unable to complete a keypress element command.')

	# --- Pointer ----------------------------------------------------------------------------

	def mouse_move(
		self,
		session_id: str,
		offset_x: int,
		offset_y: int,
		move_duration: int = 100,
		starting_point: ElementReference | None = None,
	) -> asyncio.Future[None]:
		"""Moves the pointer by the given offset, relative to its current position or to `starting_point` (move_duration in ms)"""
		move_confirmation_request = self.hub_client.mouse_move(session_id, offset_x, offset_y, move_duration, starting_point)

		return self._apply_timeout(move_confirmation_request, 'Unable to complete a mouse move command.')

	def mouse_left_click(self, session_id: str) -> asyncio.Future[None]:
		click_confirmation_request = self.hub_client.mouse_left_click(session_id)

		return self._apply_timeout(click_confirmation_request, 'Unable to complete a mouse click command.')

	# --- Waiting ----------------------------------------------------------------------------

	def wait(self, time: float = 30.0) -> asyncio.Future[None]:
		"""Resolves after `time` seconds, without any condition checks"""
		loop = self.loop
		idle = loop.create_future()

		timer = loop.call_later(max(0.0, time), settle_result, idle, None)
		idle.add_done_callback(lambda _: timer.cancel())

		return idle

	def wait_until(
		self,
		condition_met_callback: Callable[[], Awaitable[T]],
		time: float = 30.0,
		check_interval: float = 0.5,
	) -> asyncio.Future[T]:
		"""
		Resolves with the value of the first successful condition check.

		Args:
			condition_met_callback: Zero-argument callable returning an awaitable, e.g. `lambda: driver.get_source(session_id)`.
				A failed awaitable means "not yet", the callback is invoked again after `check_interval`.
			time: Total time to wait for the condition, in seconds (at least 0.5)
			check_interval: Pause between the condition checks, in seconds (at least 0.1)

		Returns:
			asyncio.Future, failed with ConditionTimeoutError if the condition isn't met in time,
			or with ConditionEvaluationError if the callback itself is broken
		"""
		time_normalized = max(0.5, time)
		check_interval_normalized = max(0.1, check_interval)

		# a fresh routine for every call, routines are never shared between waits
		timeout_interceptor = TimeoutInterceptor(time_normalized, loop=self._loop)
		check_routine = ConditionCheckRoutine(timeout_interceptor, loop=self._loop)

		return check_routine.run(condition_met_callback, check_interval_normalized)

	# --- Screenshots ------------------------------------------------------------------------

	def get_screenshot(self, session_id: str) -> asyncio.Future[bytes]:
		"""Resolves to the PNG image contents of the current viewport"""
		screenshot_request = self.hub_client.get_screenshot(session_id)

		return self._apply_timeout(screenshot_request, 'Unable to complete a get screenshot command.')

	def save_screenshot(self, session_id: str, file_path: str | Path) -> asyncio.Future[None]:
		"""
		Takes a screenshot and writes it to `file_path`, the whole fetch + write sequence is bounded by one timeout.

		A partially written file is not removed when the command times out.
		"""
		save_confirmation_request = self._save_screenshot(session_id, file_path)

		return self._apply_timeout(save_confirmation_request, 'Unable to complete a save screenshot command.')

	async def _save_screenshot(self, session_id: str, file_path: str | Path) -> None:
		try:
			image_contents = await self.hub_client.get_screenshot(session_id)
		except Exception as e:
			raise ScreenshotSaveError('Unable to save a screenshot.') from e

		try:
			async with await anyio.open_file(file_path, 'wb') as f:
				await f.write(image_contents)
		except OSError as e:
			raise ScreenshotSaveError('Unable to save a screenshot (stream).') from e

		self.logger.debug(f'📸 Saved screenshot ({len(image_contents):,} bytes) to {_log_pretty_path(str(file_path))}')
