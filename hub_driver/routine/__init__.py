from hub_driver.routine.service import ConditionCheckRoutine
from hub_driver.routine.views import PollSession, RoutineState

__all__ = [
	'ConditionCheckRoutine',
	'PollSession',
	'RoutineState',
]
