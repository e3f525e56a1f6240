from hub_driver.logging_config import setup_logging

logger = setup_logging()

from hub_driver.client import ElementReference, HubClient, W3CClient
from hub_driver.config import DriverOptions
from hub_driver.driver import SeleniumHubDriver, create_driver
from hub_driver.exceptions import (
	CommandTimeoutError,
	ConditionConfigurationError,
	ConditionEvaluationError,
	ConditionTimeoutError,
	HubDriverError,
	OperationFailedError,
	RoutineStateError,
)
from hub_driver.routine import ConditionCheckRoutine
from hub_driver.timeout import TimeoutInterceptor

__all__ = [
	'SeleniumHubDriver',
	'create_driver',
	'DriverOptions',
	'HubClient',
	'W3CClient',
	'ElementReference',
	'TimeoutInterceptor',
	'ConditionCheckRoutine',
	'HubDriverError',
	'CommandTimeoutError',
	'ConditionTimeoutError',
	'OperationFailedError',
	'ConditionEvaluationError',
	'ConditionConfigurationError',
	'RoutineStateError',
]
