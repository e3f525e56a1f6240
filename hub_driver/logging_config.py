import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from hub_driver.config import CONFIG


def setup_logging():
	log_type = CONFIG.HUB_DRIVER_LOGGING_LEVEL

	# Check if handlers are already set up
	if logging.getLogger().hasHandlers():
		return logging.getLogger('hub_driver')

	# Clear existing handlers
	root = logging.getLogger()
	root.handlers = []

	# Setup single handler for all loggers
	console = logging.StreamHandler(sys.stdout)
	console.setFormatter(logging.Formatter('%(levelname)-8s [%(name)s] %(message)s'))

	# Configure root logger only
	root.addHandler(console)

	# switch cases for log_type
	if log_type == 'debug':
		root.setLevel(logging.DEBUG)
	elif log_type == 'warning':
		root.setLevel(logging.WARNING)
	elif log_type == 'error':
		root.setLevel(logging.ERROR)
	else:
		root.setLevel(logging.INFO)

	# Configure hub_driver logger
	hub_driver_logger = logging.getLogger('hub_driver')
	hub_driver_logger.propagate = False  # Don't propagate to root logger
	hub_driver_logger.addHandler(console)
	hub_driver_logger.setLevel(root.level)  # Set same level as root logger

	# Silence or adjust third-party loggers
	third_party_loggers = [
		'httpx',
		'httpcore',
		'asyncio',
		'urllib3',
		'werkzeug',
	]
	for logger_name in third_party_loggers:
		third_party = logging.getLogger(logger_name)
		third_party.setLevel(logging.ERROR)
		third_party.propagate = False

	return hub_driver_logger
