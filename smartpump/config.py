"""
Configuration constants for the operator client
"""
import logging
import os
from pathlib import Path

log = logging.getLogger('smartpump.config')

# Backend API
API_URL = os.environ.get('SMARTPUMP_API_URL', "http://localhost:8000/api")
REQUEST_TIMEOUT = 10  # Seconds before a backend request is abandoned

# Polling
POLL_INTERVAL = 1  # Seconds between fetch cycles
STALE_AFTER = 5  # Seconds without a successful fetch before the display is flagged stale
MAX_CONSECUTIVE_ERRORS = 10  # Log a louder warning after this many failures in a row

# Alerts
LOW_WATER_FRACTION = 0.25  # Active tank below this fraction of capacity raises the alert

# Tank states the operator can command
TANK_ACTIONS = ('active', 'refill', 'idle')

# Consumption chart periods
CONSUMPTION_PERIODS = ('day', 'month', 'year')
DEFAULT_CONSUMPTION_PERIOD = 'day'

# Web Dashboard Configuration
WEB_HOST = '0.0.0.0'
WEB_PORT = 8080
WEB_USERNAME = os.environ.get('SMARTPUMP_USER', 'admin')
WEB_PASSWORD = os.environ.get('SMARTPUMP_PASS', 'smartpump')

# Logging
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'

# Config file path (optional)
CONFIG_FILE = Path.home() / '.config' / 'smartpump' / 'client.conf'

# Keys the entry points read from the config file
CONFIG_KEYS = ('API_URL', 'REQUEST_TIMEOUT', 'POLL_INTERVAL', 'STALE_AFTER', 'WEB_HOST', 'WEB_PORT')

def parse_config_value(text):
    """'true'/'false' become bools, numbers become int or float, anything else stays a string"""
    if text.lower() in ('true', 'false'):
        return text.lower() == 'true'
    if text.isdigit():
        return int(text)
    try:
        return float(text)
    except ValueError:
        return text

def load_config_file(path=None):
    """
    Read KEY=value lines from the client config file.
    A missing or unreadable file gives an empty dict.
    """
    config_path = Path(path) if path else CONFIG_FILE
    if not config_path.exists():
        return {}

    try:
        lines = config_path.read_text().splitlines()
    except OSError as e:
        log.warning("Could not load config file %s: %s", config_path, e)
        return {}

    config = {}
    for number, line in enumerate(lines, 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        key, sep, value = line.partition('=')
        key = key.strip()
        if not sep or key not in CONFIG_KEYS:
            log.warning("%s:%d: ignoring %r", config_path, number, line)
            continue
        config[key] = parse_config_value(value.strip())
    return config
