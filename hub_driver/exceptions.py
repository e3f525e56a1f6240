class HubDriverError(Exception):
	"""Base class for all hub driver errors"""


class CommandTimeoutError(HubDriverError, TimeoutError):
	"""A command (or a condition wait) was not completed within the allotted time"""

	def __init__(self, message: str, timeout: float | None = None):
		super().__init__(message)
		self.timeout = timeout


class ConditionTimeoutError(CommandTimeoutError):
	"""
	A wait_until() condition was not met before its deadline.

	Intermediate failures are not chained as the cause, the last one is kept on
	`last_failure` for callers that want to know why the final attempt failed.
	"""

	def __init__(
		self,
		message: str,
		timeout: float | None = None,
		attempts: int = 0,
		last_failure: BaseException | None = None,
	):
		super().__init__(message, timeout)
		self.attempts = attempts
		self.last_failure = last_failure


class OperationFailedError(HubDriverError):
	"""The remote operation itself has failed (transport, protocol or domain level)"""


class HubRequestError(OperationFailedError):
	"""The HTTP request to the hub could not be completed"""


class HubResponseError(OperationFailedError):
	"""The hub response could not be deserialized or has an unexpected shape"""


class WebDriverCommandError(OperationFailedError):
	"""The hub has answered with a W3C error payload"""

	def __init__(self, message: str, error: str = 'unknown error', status_code: int = 500):
		super().__init__(message)
		self.error = error
		self.status_code = status_code


class NoSuchElementError(WebDriverCommandError):
	pass


class NoSuchWindowError(WebDriverCommandError):
	pass


class InvalidSessionIdError(WebDriverCommandError):
	pass


class StaleElementReferenceError(WebDriverCommandError):
	pass


class ScreenshotSaveError(OperationFailedError):
	"""A screenshot could not be fetched or persisted"""


class ConditionEvaluationError(HubDriverError):
	"""A condition callback could not be evaluated; never retried"""


class ConditionConfigurationError(ConditionEvaluationError, TypeError):
	"""A condition callback has returned something that is not awaitable"""


class RoutineStateError(HubDriverError, RuntimeError):
	"""A condition check routine was started while it is already running"""


# W3C error codes -> exception classes, see https://www.w3.org/TR/webdriver/#errors
W3C_ERRORS: dict[str, type[WebDriverCommandError]] = {
	'no such element': NoSuchElementError,
	'no such window': NoSuchWindowError,
	'invalid session id': InvalidSessionIdError,
	'stale element reference': StaleElementReferenceError,
}


def error_for_w3c_code(error: str) -> type[WebDriverCommandError]:
	return W3C_ERRORS.get(error, WebDriverCommandError)
