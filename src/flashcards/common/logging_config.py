"""
Logging configuration for the flashcard study session.

Human-readable console output with structured context fields appended.
"""
import logging
import sys

# Attributes every LogRecord carries; anything else came in through extra={...}
_STANDARD_ATTRS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'asctime', 'getMessage', 'taskName',
})


class ContextFormatter(logging.Formatter):
    """Formatter that appends structured context fields to log messages.

    Format: timestamp [LEVEL] logger_name: message | key1=value1 key2=value2
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m',
        'GRAY': '\033[90m',
    }

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_color: bool = True) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def _paint(self, key: str, text: str) -> str:
        if not self.use_color:
            return text
        return f"{self.COLORS[key]}{text}{self.COLORS['RESET']}"

    def format(self, record: logging.LogRecord) -> str:
        base_msg = super().format(record)

        levelname = record.levelname
        if levelname in self.COLORS:
            base_msg = base_msg.replace(f"[{levelname}]", self._paint(levelname, f"[{levelname}]"))

        extra_fields = [
            f"{key}={value}"
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and value is not None
        ]
        if extra_fields:
            return f"{base_msg}{self._paint('GRAY', ' | ' + ' '.join(extra_fields))}"
        return base_msg


def setup_logging(level: str = "INFO", use_color: bool | None = None) -> None:
    """Configure logging for the ``flashcards`` namespace.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               DEBUG shows every command, timer tick and speech request.
        use_color: Force ANSI colors on/off. Defaults to whether stdout is a TTY.

    Example:
        >>> from flashcards.common.logging_config import setup_logging
        >>> setup_logging("DEBUG")
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if use_color is None:
        use_color = sys.stdout.isatty()

    formatter = ContextFormatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        use_color=use_color,
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger('flashcards')
    root_logger.setLevel(numeric_level)

    # Avoid duplicate handlers when called twice
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    root_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Deck loaded", extra={"level": "N5", "cards": 120})
    """
    return logging.getLogger(name)
