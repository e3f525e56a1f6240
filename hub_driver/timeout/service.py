import asyncio
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from hub_driver.exceptions import CommandTimeoutError
from hub_driver.utils import consume_exception, settle_exception, settle_result

logger = logging.getLogger(__name__)

T = TypeVar('T')


class TimeoutInterceptor:
	"""
	Rejects a driver future if it isn't settled within the specified amount of time.

	The interceptor only stops *waiting*: the intercepted operation is not cancelled when the
	deadline fires, it keeps running in the background and its outcome is discarded.
	"""

	def __init__(self, timeout: float, loop: asyncio.AbstractEventLoop | None = None):
		if timeout <= 0:
			raise ValueError(f'Timeout must be a positive number of seconds, got: {timeout}')

		self.timeout = timeout
		self._loop = loop

	def __repr__(self) -> str:
		return f'TimeoutInterceptor(timeout={self.timeout:g}s)'

	@property
	def loop(self) -> asyncio.AbstractEventLoop:
		return self._loop or asyncio.get_running_loop()

	def apply_timeout(
		self,
		operation: Awaitable[T],
		rejection_message: str = 'Unable to complete a command.',
	) -> asyncio.Future[T]:
		"""
		Returns a future that mirrors `operation`, or fails with CommandTimeoutError when `operation`
		is not settled within `self.timeout` seconds.

		Args:
			operation: A future, task or coroutine to be timed out (coroutines are scheduled right away)
			rejection_message: Prefix for the timeout error message

		Returns:
			asyncio.Future with the result of `operation`
		"""
		loop = self.loop
		source: asyncio.Future[T] = asyncio.ensure_future(operation, loop=loop)
		timed: asyncio.Future[T] = loop.create_future()

		def on_deadline() -> None:
			if timed.done():
				return

			message = f'{rejection_message} Timed out after {self.timeout:g} seconds.'
			logger.warning(f'⏱️ {message}')
			settle_exception(timed, CommandTimeoutError(message, timeout=self.timeout))

		def on_operation_settled(settled: asyncio.Future[Any]) -> None:
			if timed.done():
				# too late, the caller has stopped waiting for this one
				consume_exception(settled)
				return

			if settled.cancelled():
				timed.cancel()
				return

			exception = settled.exception()
			if exception is not None:
				settle_exception(timed, exception)
			else:
				settle_result(timed, settled.result())

		deadline = loop.call_later(self.timeout, on_deadline)
		# single cleanup point for the deadline handle, reached on every settlement path (including caller cancellation)
		timed.add_done_callback(lambda _: deadline.cancel())
		source.add_done_callback(on_operation_settled)

		return timed
