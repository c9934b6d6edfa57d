import os
import json
import logging
from typing import Any, Callable, Optional

CONFIG_PATH = os.environ.get('CONFIG_PATH', 'config.json')

DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 37813
DEFAULT_CLIENT_EXPIRY = 5
DEFAULT_MAX_ALARMS = 4
DEFAULT_SEND_TIMEOUT = 2.0

log = logging.getLogger(__name__)


def _positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _valid_port(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value < 65536


class Config:
    def __init__(self, config_path: Optional[str] = None):
        self.host: str = DEFAULT_HOST
        self.port: int = DEFAULT_PORT

        self.client_expiry: float = DEFAULT_CLIENT_EXPIRY
        self.max_alarms: int = DEFAULT_MAX_ALARMS
        self.send_timeout: float = DEFAULT_SEND_TIMEOUT

        config_path = config_path or CONFIG_PATH
        config_data = {}

        if os.path.exists(config_path):
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    config_data = json.load(f)
                    log.info('Successfully loaded config file.')
            except Exception as e:
                log.critical(f'Failed to load config file: {e}')
        else:
            log.info(f'Config file \'{config_path}\' not found. Using defaults.')

        if not isinstance(config_data, dict):
            log.critical('Failed to parse config file: top level must be an object.')
            config_data = {}

        # Load Server Config
        self.host = self._read(config_data, 'host', DEFAULT_HOST, lambda v: isinstance(v, str) and v != '')
        self.port = self._read(config_data, 'port', DEFAULT_PORT, _valid_port)

        # Load Hub Config
        self.client_expiry = self._read(config_data, 'clientExpiry', DEFAULT_CLIENT_EXPIRY, _positive_number)
        self.max_alarms = self._read(config_data, 'maxAlarms', DEFAULT_MAX_ALARMS, _non_negative_int)
        self.send_timeout = self._read(config_data, 'sendTimeout', DEFAULT_SEND_TIMEOUT, _positive_number)

        # Environment overrides the file
        env_host = os.environ.get('HOST', None)
        if env_host:
            self.host = env_host

        env_port = os.environ.get('PORT', None)
        if env_port:
            try:
                port = int(env_port)
                if not _valid_port(port):
                    raise ValueError(f'{port} is out of range')
                self.port = port
            except ValueError as e:
                log.critical(f'Invalid PORT environment variable \'{env_port}\': {e}')

    @staticmethod
    def _read(config_data: dict, key: str, default: Any, is_valid: Callable[[Any], bool]) -> Any:
        value = config_data.get(key, default)
        if not is_valid(value):
            log.critical(f'Invalid value for \'{key}\' in config file: {value!r}. Using {default!r}.')
            return default
        return value

CONFIG = Config()
