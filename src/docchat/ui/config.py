"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""

import logging


class LogLevel:
    """Log level constants with numeric values for comparison.

    Values match the stdlib ``logging`` levels so records can be filtered
    against the panel threshold directly.
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARN",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the display name for a log level."""
        if level >= cls.ERROR:
            return cls._names[cls.ERROR]
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Input history configuration
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages

# Chat display configuration
CHAT_TIMESTAMP_FORMAT = "%H:%M"
PRINT_TITLE = "Print Message"

# Spreadsheet preview
PREVIEW_COLUMN_WIDTH = 16

# Notifications (seconds)
NOTIFY_SHORT = 2
NOTIFY_ERROR = 5
