import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

from hub_driver.exceptions import (
	CommandTimeoutError,
	ConditionConfigurationError,
	ConditionEvaluationError,
	ConditionTimeoutError,
	RoutineStateError,
)
from hub_driver.routine.views import PollSession, RoutineState
from hub_driver.scheduler import PeriodicTimer
from hub_driver.timeout import TimeoutInterceptor
from hub_driver.utils import consume_exception, settle_exception, settle_result

logger = logging.getLogger(__name__)


class ConditionCheckRoutine:
	"""
	Runs periodic condition checks for the web driver, using the given event loop.

	The condition callback is invoked right away and then every `check_interval` seconds, unless
	the future it returned on a previous check is still pending. The first successful future resolves the
	routine, failed ones are swallowed and retried on the next tick. The whole routine is bounded
	by the injected TimeoutInterceptor.
	"""

	def __init__(self, timeout_interceptor: TimeoutInterceptor, loop: asyncio.AbstractEventLoop | None = None):
		self.timeout_interceptor = timeout_interceptor
		self._loop = loop
		self._session: PollSession | None = None

	def __repr__(self) -> str:
		state = self._session.state.value if self._session else 'new'
		return f'ConditionCheckRoutine({state}, attempts={self.attempts}, {self.timeout_interceptor})'

	@property
	def loop(self) -> asyncio.AbstractEventLoop:
		return self._loop or asyncio.get_running_loop()

	@property
	def is_running(self) -> bool:
		return self._session is not None and self._session.timer is not None and self._session.timer.active

	@property
	def state(self) -> RoutineState | None:
		"""State of the last run, None if the routine has never been started"""
		return self._session.state if self._session else None

	@property
	def attempts(self) -> int:
		"""How many times the condition callback was invoked during the last run"""
		return self._session.attempts if self._session else 0

	@property
	def last_failure(self) -> BaseException | None:
		"""The reason of the most recent failed condition check during the last run"""
		return self._session.last_failure if self._session else None

	def run(self, condition_met_callback: Callable[[], Awaitable[Any]], check_interval: float = 0.5) -> asyncio.Future[Any]:
		"""
		Starts condition checks and returns a future with the value of the first successful check.

		Args:
			condition_met_callback: Zero-argument callable returning an awaitable, e.g. an async function
			check_interval: The interval for condition checks, in seconds

		Raises:
			RoutineStateError: Whenever the routine is already in the running state
		"""
		if self.is_running:
			raise RoutineStateError('Routine is already running.')

		return self._run_internal(condition_met_callback, check_interval)

	def _run_internal(self, condition_met_callback: Callable[[], Awaitable[Any]], check_interval: float) -> asyncio.Future[Any]:
		loop = self.loop

		session = PollSession(
			condition_met_callback=condition_met_callback,
			check_interval=check_interval,
			result=loop.create_future(),
		)
		session.timer = PeriodicTimer(check_interval, partial(self._evaluate, session), loop=loop)
		self._session = session

		timed_result = self.timeout_interceptor.apply_timeout(
			session.result,
			'A condition is not met within the specified amount of time.',
		)

		condition_met = loop.create_future()
		timed_result.add_done_callback(partial(self._finalize, session, condition_met))
		condition_met.add_done_callback(lambda f: timed_result.cancel() if f.cancelled() else None)

		session.timer.start()
		logger.debug(f'🔁 Started condition checks every {check_interval:g}s ({self.timeout_interceptor})')

		# the first check runs right away, the timer drives the following ones
		self._evaluate(session)

		return condition_met

	def _evaluate(self, session: PollSession) -> None:
		# do not try to evaluate a condition if a previous result is not settled yet
		if session.state is not RoutineState.IDLE:
			return

		session.attempts += 1
		try:
			evaluation = session.condition_met_callback()
		except Exception as e:
			reason = ConditionEvaluationError('Unable to evaluate a condition callback.')
			reason.__cause__ = e
			self._fail(session, reason)
			return

		if not inspect.isawaitable(evaluation):
			self._fail(
				session,
				ConditionConfigurationError(
					f'Unable to evaluate a condition callback: return value must be awaitable, got {type(evaluation).__name__}.'
				),
			)
			return

		session.state = RoutineState.EVALUATING
		evaluation_future = asyncio.ensure_future(evaluation, loop=self.loop)
		evaluation_future.add_done_callback(partial(self._on_evaluated, session))

	def _on_evaluated(self, session: PollSession, evaluation: asyncio.Future[Any]) -> None:
		if session.state is RoutineState.SETTLED:
			consume_exception(evaluation)
			return

		if evaluation.cancelled():
			session.last_failure = asyncio.CancelledError(f'Condition check #{session.attempts} was cancelled')
			session.state = RoutineState.IDLE
			return

		exception = evaluation.exception()
		if exception is not None:
			# signals that we can take another future from the condition callback to continue our checks
			logger.debug(f'Condition check #{session.attempts} failed: {type(exception).__name__}: {exception}')
			session.last_failure = exception
			session.state = RoutineState.IDLE
			return

		logger.debug(f'✅ Condition met after {session.attempts} check(s)')
		session.state = RoutineState.SETTLED
		settle_result(session.result, evaluation.result())

	def _fail(self, session: PollSession, reason: BaseException) -> None:
		logger.debug(f'❌ Condition check #{session.attempts} is fatal: {type(reason).__name__}: {reason}')
		session.state = RoutineState.SETTLED
		settle_exception(session.result, reason)

	def _finalize(self, session: PollSession, condition_met: asyncio.Future[Any], timed_result: asyncio.Future[Any]) -> None:
		# cleaning up the periodic timer with condition-check logic, before anyone observes the outcome
		if session.timer is not None and session.timer.cancel():
			logger.debug(f'Stopped condition checks after {session.attempts} check(s)')
		session.state = RoutineState.SETTLED
		if not session.result.done():
			session.result.cancel()

		if timed_result.cancelled():
			condition_met.cancel()
			return

		exception = timed_result.exception()
		if isinstance(exception, CommandTimeoutError):
			exception = ConditionTimeoutError(
				str(exception),
				timeout=exception.timeout,
				attempts=session.attempts,
				last_failure=session.last_failure,
			)

		if exception is not None:
			settle_exception(condition_met, exception)
		else:
			settle_result(condition_met, timed_result.result())
