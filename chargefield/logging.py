"""Minimal logging used throughout chargefield. Messages are printed to standard output
and filtered by a global `LogLevel`."""

import os
import time
from contextlib import contextmanager
from enum import IntEnum

__pdoc__ = {}
__pdoc__['log_info'] = False
__pdoc__['log_debug'] = False
__pdoc__['log_warning'] = False
__pdoc__['log_error'] = False
__pdoc__['log_duration'] = False


class LogLevel(IntEnum):
    """Verbosity of the messages printed by chargefield."""

    DEBUG = 0
    """Print everything, including per-trace diagnostics."""

    INFO = 1
    """Print informational messages, warnings and errors."""

    WARNING = 2
    """Print warnings and errors."""

    ERROR = 3
    """Print errors only."""

    SILENT = 4
    """Print nothing."""


def _level_from_environment(default=LogLevel.INFO):
    value = os.environ.get('CHARGEFIELD_LOG_LEVEL')

    if value is None or value.upper() not in LogLevel.__members__:
        return default

    return LogLevel[value.upper()]

_log_level = _level_from_environment()

def set_log_level(level):
    """Set the current `LogLevel`. The initial level is taken from the environment
    variable CHARGEFIELD_LOG_LEVEL ('debug', 'info', 'warning', 'error' or 'silent')
    and defaults to `LogLevel.INFO`."""
    global _log_level
    assert isinstance(level, LogLevel), "Please pass a chargefield.logging.LogLevel"
    _log_level = level

def get_log_level():
    return _log_level

def log_debug(msg):
    if _log_level <= LogLevel.DEBUG:
        print('DEBUG: ', msg)

def log_info(msg):
    if _log_level <= LogLevel.INFO:
        print(msg)

def log_warning(msg):
    if _log_level <= LogLevel.WARNING:
        print('WARNING: ', msg)

def log_error(msg):
    if _log_level <= LogLevel.ERROR:
        print('ERROR: ', msg)

@contextmanager
def log_duration(description, log=log_debug):
    st = time.time()
    yield
    log(f'{description} took {(time.time()-st)*1000:.1f} ms')
