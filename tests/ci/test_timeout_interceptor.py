"""Tests for TimeoutInterceptor: racing operations against a deadline."""

import asyncio
import time

import pytest

from hub_driver.exceptions import CommandTimeoutError, NoSuchElementError, OperationFailedError
from hub_driver.timeout import TimeoutInterceptor


async def sleep_then(value, delay: float):
	await asyncio.sleep(delay)
	return value


async def sleep_then_raise(exception: BaseException, delay: float):
	await asyncio.sleep(delay)
	raise exception


class TestTimeoutInterceptor:
	"""Deadline races for coroutines and futures."""

	async def test_forwards_result_when_operation_settles_first(self):
		interceptor = TimeoutInterceptor(1.0)

		start = time.monotonic()
		result = await interceptor.apply_timeout(sleep_then('done', 0.1), 'Unable to complete a test command.')
		elapsed = time.monotonic() - start

		assert result == 'done'
		assert elapsed < 0.5

	async def test_rejects_with_timeout_error_when_deadline_fires_first(self):
		interceptor = TimeoutInterceptor(0.2)

		start = time.monotonic()
		with pytest.raises(CommandTimeoutError) as exc_info:
			await interceptor.apply_timeout(sleep_then('late', 2.0), 'Unable to complete a test command.')
		elapsed = time.monotonic() - start

		assert 0.15 <= elapsed < 1.0
		assert str(exc_info.value) == 'Unable to complete a test command. Timed out after 0.2 seconds.'
		assert exc_info.value.timeout == 0.2
		assert isinstance(exc_info.value, TimeoutError)

	async def test_default_rejection_message(self):
		interceptor = TimeoutInterceptor(0.1)

		with pytest.raises(CommandTimeoutError, match=r'^Unable to complete a command\. Timed out after 0\.1 seconds\.$'):
			await interceptor.apply_timeout(sleep_then(None, 1.0))

	async def test_forwards_original_failure_unchanged(self):
		interceptor = TimeoutInterceptor(1.0)
		failure = NoSuchElementError('Unable to find element: no such element', error='no such element', status_code=404)

		with pytest.raises(NoSuchElementError) as exc_info:
			await interceptor.apply_timeout(sleep_then_raise(failure, 0.05))

		assert exc_info.value is failure

	async def test_operation_failure_is_not_reported_as_timeout(self):
		interceptor = TimeoutInterceptor(1.0)

		with pytest.raises(OperationFailedError) as exc_info:
			await interceptor.apply_timeout(sleep_then_raise(OperationFailedError('boom'), 0.0))

		assert not isinstance(exc_info.value, CommandTimeoutError)

	async def test_accepts_plain_futures(self):
		loop = asyncio.get_running_loop()
		interceptor = TimeoutInterceptor(1.0)
		operation = loop.create_future()
		loop.call_later(0.05, operation.set_result, 42)

		assert await interceptor.apply_timeout(operation) == 42

	async def test_timed_out_operation_is_not_cancelled(self):
		loop = asyncio.get_running_loop()
		interceptor = TimeoutInterceptor(0.1)
		operation = loop.create_future()

		with pytest.raises(CommandTimeoutError):
			await interceptor.apply_timeout(operation)

		# the interceptor only stops waiting, the operation is still in flight
		assert not operation.done()

		# a late outcome is discarded silently
		operation.set_exception(OperationFailedError('too late'))
		await asyncio.sleep(0)

	async def test_deadline_handle_is_cancelled_after_settlement(self, monkeypatch):
		loop = asyncio.get_running_loop()
		handles: list[asyncio.TimerHandle] = []
		original_call_later = loop.call_later

		def recording_call_later(*args, **kwargs):
			handle = original_call_later(*args, **kwargs)
			handles.append(handle)
			return handle

		monkeypatch.setattr(loop, 'call_later', recording_call_later)

		interceptor = TimeoutInterceptor(30.0)
		assert await interceptor.apply_timeout(sleep_then('fast', 0.0)) == 'fast'

		assert len(handles) == 1
		assert handles[0].cancelled()

	async def test_deadline_handle_is_cancelled_when_caller_cancels(self, monkeypatch):
		loop = asyncio.get_running_loop()
		handles: list[asyncio.TimerHandle] = []
		original_call_later = loop.call_later

		def recording_call_later(*args, **kwargs):
			handle = original_call_later(*args, **kwargs)
			handles.append(handle)
			return handle

		monkeypatch.setattr(loop, 'call_later', recording_call_later)

		interceptor = TimeoutInterceptor(30.0)
		timed = interceptor.apply_timeout(sleep_then('slow', 10.0))
		timed.cancel()
		await asyncio.sleep(0)

		assert timed.cancelled()
		assert handles[0].cancelled()

	async def test_operation_cancellation_cancels_the_result(self):
		loop = asyncio.get_running_loop()
		interceptor = TimeoutInterceptor(1.0)
		operation = loop.create_future()

		timed = interceptor.apply_timeout(operation)
		operation.cancel()

		with pytest.raises(asyncio.CancelledError):
			await timed

	async def test_independent_deadlines_per_operation(self):
		interceptor = TimeoutInterceptor(0.3)

		fast, slow = await asyncio.gather(
			interceptor.apply_timeout(sleep_then('fast', 0.05)),
			interceptor.apply_timeout(sleep_then('slow', 1.0)),
			return_exceptions=True,
		)

		assert fast == 'fast'
		assert isinstance(slow, CommandTimeoutError)

	@pytest.mark.parametrize('timeout', [0, -1, -0.5])
	def test_rejects_non_positive_timeout(self, timeout):
		with pytest.raises(ValueError):
			TimeoutInterceptor(timeout)
