from hub_driver.driver.factory import create_driver
from hub_driver.driver.service import SeleniumHubDriver

__all__ = [
	'SeleniumHubDriver',
	'create_driver',
]
