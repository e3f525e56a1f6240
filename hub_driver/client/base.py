"""
The async client protocol for the Selenium Grid server (hub).

Each session represents an opened browser, with some user profile and tabs (window handles).
Every method sends exactly one logical command and either returns its value or raises an
OperationFailedError subclass; the driver on top of it is responsible for timeouts.
"""

from typing import Protocol

from hub_driver.client.views import ElementReference


class HubClient(Protocol):
	async def get_session_identifiers(self) -> list[str]: ...

	async def create_session(self) -> str: ...

	async def remove_session(self, session_id: str) -> None: ...

	async def get_tab_identifiers(self, session_id: str) -> list[str]: ...

	async def get_active_tab_identifier(self, session_id: str) -> str: ...

	async def set_active_tab(self, session_id: str, tab_id: str) -> None: ...

	async def open_uri(self, session_id: str, uri: str) -> None: ...

	async def get_current_uri(self, session_id: str) -> str: ...

	async def get_source(self, session_id: str) -> str: ...

	async def get_element_identifier(self, session_id: str, xpath_query: str) -> ElementReference: ...

	async def get_active_element_identifier(self, session_id: str) -> ElementReference: ...

	async def get_element_visibility(self, session_id: str, element: ElementReference) -> bool: ...

	async def click_element(self, session_id: str, element: ElementReference) -> None: ...

	async def keypress_element(self, session_id: str, element: ElementReference, key_sequence: str) -> None: ...

	async def mouse_move(
		self,
		session_id: str,
		offset_x: int,
		offset_y: int,
		move_duration: int = 100,
		starting_point: ElementReference | None = None,
	) -> None: ...

	async def mouse_left_click(self, session_id: str) -> None: ...

	async def get_screenshot(self, session_id: str) -> bytes: ...

	async def aclose(self) -> None: ...
