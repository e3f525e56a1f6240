from hub_driver.client.base import HubClient
from hub_driver.client.views import ElementReference
from hub_driver.client.w3c import W3CClient

__all__ = [
	'HubClient',
	'ElementReference',
	'W3CClient',
]
