from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

# see https://www.w3.org/TR/webdriver/#elements
W3C_ELEMENT_KEY = 'element-6066-11e4-a52e-4f735466cecf'
LEGACY_ELEMENT_KEY = 'ELEMENT'  # JSON wire protocol, still sent by some grid nodes


class ElementReference(BaseModel):
	"""Web element reference, as returned by the remote end"""

	model_config = ConfigDict(frozen=True)

	element_id: str = Field(min_length=1)

	def __str__(self) -> str:
		return self.element_id

	@classmethod
	def from_w3c(cls, value: Any) -> Self:
		if isinstance(value, dict):
			element_id = value.get(W3C_ELEMENT_KEY) or value.get(LEGACY_ELEMENT_KEY)
			if isinstance(element_id, str) and element_id:
				return cls(element_id=element_id)
		raise ValueError(f'Not a web element reference: {value!r}')

	def to_w3c(self) -> dict[str, str]:
		return {W3C_ELEMENT_KEY: self.element_id}


class W3CResponse(BaseModel):
	"""Envelope of every response sent by the hub"""

	model_config = ConfigDict(extra='allow', populate_by_name=True)

	value: Any = None
	session_id: str | None = Field(default=None, alias='sessionId')  # legacy responses put it on the top level

	@property
	def is_error(self) -> bool:
		return isinstance(self.value, dict) and 'error' in self.value


class W3CErrorValue(BaseModel):
	"""The `value` of a failed command, see https://www.w3.org/TR/webdriver/#errors"""

	model_config = ConfigDict(extra='allow')

	error: str
	message: str = ''
	stacktrace: str = Field(default='', repr=False)
