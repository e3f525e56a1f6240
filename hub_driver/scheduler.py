import asyncio
import logging
from collections.abc import Callable
from typing import Self

logger = logging.getLogger(__name__)


class PeriodicTimer:
	"""
	Calls `callback` every `interval` seconds on the given event loop until cancelled.

	Ticks are planned against loop.time() at `start + n * interval`, so they don't drift when
	callbacks are slow. When the loop falls behind, missed ticks are skipped instead of being
	fired in a burst, which keeps the tick times non-decreasing.

	>>> timer = PeriodicTimer(0.5, check_something).start()
	>>> ...
	>>> timer.cancel()
	"""

	def __init__(self, interval: float, callback: Callable[[], object], loop: asyncio.AbstractEventLoop | None = None):
		if interval <= 0:
			raise ValueError(f'PeriodicTimer interval must be positive, got: {interval}')

		self.interval = interval
		self.callback = callback
		self.loop = loop or asyncio.get_running_loop()
		self.ticks = 0

		self._handle: asyncio.TimerHandle | None = None
		self._started_at: float | None = None
		self._cancelled = False

	def __repr__(self) -> str:
		state = 'cancelled' if self._cancelled else 'active' if self.active else 'idle'
		return f'<PeriodicTimer every {self.interval}s {state} ticks={self.ticks}>'

	@property
	def active(self) -> bool:
		return self._started_at is not None and not self._cancelled

	@property
	def cancelled(self) -> bool:
		return self._cancelled

	def start(self) -> Self:
		if self._started_at is not None:
			raise RuntimeError(f'{self} can only be started once')

		self._started_at = self.loop.time()
		self._schedule(1)
		return self

	def cancel(self) -> bool:
		"""Stops the timer, returns False if it was already cancelled"""
		if self._cancelled:
			return False

		self._cancelled = True
		if self._handle is not None:
			self._handle.cancel()
			self._handle = None
		return True

	def _schedule(self, tick: int) -> None:
		assert self._started_at is not None
		self._handle = self.loop.call_at(self._started_at + tick * self.interval, self._fire, tick)

	def _fire(self, tick: int) -> None:
		if self._cancelled:
			return

		self.ticks += 1

		# the next tick is planned before the callback runs, so the callback is free to cancel us
		assert self._started_at is not None
		elapsed_ticks = int((self.loop.time() - self._started_at) / self.interval)
		next_tick = max(tick + 1, elapsed_ticks + 1)
		if next_tick > tick + 1:
			logger.debug(f'{self} skipped {next_tick - tick - 1} tick(s), the event loop is falling behind')
		self._schedule(next_tick)

		self.callback()


def add_periodic_timer(
	interval: float, callback: Callable[[], object], loop: asyncio.AbstractEventLoop | None = None
) -> PeriodicTimer:
	"""Creates and starts a PeriodicTimer"""
	return PeriodicTimer(interval, callback, loop=loop).start()
