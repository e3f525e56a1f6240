import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hub_driver.scheduler import PeriodicTimer


class RoutineState(str, Enum):
	"""Single-flight state of a poll session"""

	IDLE = 'idle'  # next tick may evaluate the condition
	EVALUATING = 'evaluating'  # a condition future is outstanding, ticks are no-ops
	SETTLED = 'settled'  # the outcome is known, nothing will be evaluated anymore


@dataclass
class PollSession:
	"""State of a single ConditionCheckRoutine.run() invocation"""

	condition_met_callback: Callable[[], Awaitable[Any]]
	check_interval: float
	result: asyncio.Future[Any]
	state: RoutineState = RoutineState.IDLE
	timer: PeriodicTimer | None = None
	attempts: int = 0
	last_failure: BaseException | None = field(default=None, repr=False)
