"""Initiate logging for termpix."""

from __future__ import annotations

import logging
import logging.config
import sys
import textwrap
from pathlib import Path
from typing import TYPE_CHECKING

from prompt_toolkit.formatted_text.base import FormattedText
from prompt_toolkit.output.defaults import create_output
from prompt_toolkit.shortcuts.utils import print_formatted_text
from prompt_toolkit.styles.style import Style

from termpix.utils import dict_merge

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Any, TextIO

    from prompt_toolkit.formatted_text.base import StyleAndTextTuples
    from prompt_toolkit.styles.base import BaseStyle

    from termpix.config import Config

log = logging.getLogger(__name__)

LOG_STYLE = [
    ("log.level.notset", "fg:ansigray"),
    ("log.level.debug", "fg:ansigreen"),
    ("log.level.info", "fg:ansiblue"),
    ("log.level.warning", "fg:ansiyellow"),
    ("log.level.error", "fg:ansired"),
    ("log.level.critical", "fg:ansiwhite bg:ansired bold"),
    ("log.ref", "fg:ansigray"),
    ("log.date", "fg:#00875f"),
    ("log.traceback", "fg:ansired"),
]


class BufferedLogs(logging.Handler):
    """A handler that collects log records and replays them on exit."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize the collector.

        Args:
            logger: Logger to collect from and replay to. If None, uses root logger.
        """
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self._logger = logger or logging.getLogger()
        self._original_handlers: list[logging.Handler] = []

    def emit(self, record: logging.LogRecord) -> None:
        """Store the log record."""
        self.records.append(record)

    def replay(self) -> None:
        """Replay collected logs through the original logger."""
        for record in self.records:
            self._logger.handle(record)

    def __enter__(self) -> BufferedLogs:
        """Store and replace the log handlers."""
        self._original_handlers = self._logger.handlers[:]
        self._logger.handlers.clear()
        self._logger.addHandler(self)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_traceback: TracebackType | None,
    ) -> None:
        """Restore the original handlers and replay collected records."""
        self._logger.removeHandler(self)
        self._logger.handlers = self._original_handlers
        self.replay()


class FtFormatter(logging.Formatter):
    """Base class for formatted text logging formatter."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Create a new formatter instance."""
        super().__init__(*args, **kwargs)
        self.datefmt = self.datefmt or "%H:%M:%S"

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        """Format certain attributes on the log record."""
        record.asctime = self.formatTime(record, self.datefmt)
        record.message = record.getMessage()
        record.exc_text = ""
        if record.exc_info:
            record.exc_text = self.formatException(record.exc_info)
        return record

    def ft_format(
        self, record: logging.LogRecord, width: int | None = None
    ) -> FormattedText:
        """Format a log record as :py:class:`FormattedText`."""
        return FormattedText([])


class ConsoleFormatter(FtFormatter):
    """A log formatter for log entries printed to the terminal's standard error."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Create a new formatter instance."""
        super().__init__(*args, **kwargs)
        self.last_date: str | None = None

    def ft_format(
        self, record: logging.LogRecord, width: int | None = None
    ) -> FormattedText:
        """Format log records for display in the terminal."""
        width = width or 80
        record = self.prepare(record)

        date = f"{record.asctime}"
        if date == self.last_date:
            date = " " * len(date)
        else:
            self.last_date = date
        ref = f"{record.name}.{record.funcName}:{record.lineno}"

        msg_pad = len(date) + 10
        msg_width = max(width - msg_pad - len(ref) - 1, 20)
        msg_lines = textwrap.wrap(
            record.message, width=msg_width, replace_whitespace=False
        ) or [""]

        output: StyleAndTextTuples = [
            ("class:log.date", date),
            ("", " " * (9 - len(record.levelname))),
            (f"class:log.level.{record.levelname.lower()}", record.levelname),
            ("", " "),
            ("", msg_lines[0].ljust(msg_width)),
            ("", " "),
            ("class:log.ref", ref),
        ]
        for line in msg_lines[1:]:
            output += [("", "\n"), ("", " " * msg_pad + line)]
        if record.exc_text:
            output += [("", "\n")]
            output += [
                ("class:log.traceback", " " * msg_pad + line + "\n")
                for line in record.exc_text.splitlines()
            ]
        else:
            output += [("", "\n")]
        return FormattedText(output)


class FormattedTextHandler(logging.StreamHandler):
    """Print log records to a terminal stream as formatted text."""

    formatter: FtFormatter

    def __init__(
        self,
        stream: str | TextIO | None = None,
        style: BaseStyle | None = None,
    ) -> None:
        """Create a new log handler instance."""
        # If a filename string is passed, open it as a stream
        if isinstance(stream, str):
            stream = open(stream, "a")  # noqa: SIM115,PTH123
        super().__init__(stream)
        self.style = style or Style(LOG_STYLE)
        self.output = create_output(stdout=self.stream)

    def ft_format(self, record: logging.LogRecord) -> FormattedText:
        """Format the specified record."""
        if self.formatter is not None:
            return self.formatter.ft_format(record, width=self.output.get_size()[1])
        else:
            return FormattedText([])

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a formatted record."""
        try:
            print_formatted_text(
                self.ft_format(record),
                end="",
                style=self.style,
                output=self.output,
                include_default_pygments_style=False,
            )
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


def handle_exception(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType | None,
) -> Any:
    """Log unhandled exceptions and their tracebacks in the log.

    Args:
        exc_type: The type of the exception
        exc_value: The exception instance
        exc_traceback: The associated traceback
    """
    # Do not log keyboard interrupts
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    log.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))


def setup_logs(config: Config | None = None) -> None:
    """Configure the logger for termpix."""
    log_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "file_format": {
                "format": "{asctime}.{msecs:03.0f} {levelname:<7} "
                "[{name}.{funcName}:{lineno}] {message}",
                "style": "{",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "console_format": {
                "()": ConsoleFormatter,
            },
        },
        "handlers": {
            "console": {
                "level": "CRITICAL",
                "()": FormattedTextHandler,
                "formatter": "console_format",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "termpix": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    if config is not None:
        log_file = config.log_file or ""
        # Standard output carries images, so terminal logging goes to standard error
        log_to_console = log_file in {"-", "/dev/stderr"}
        log_level = config.log_level.upper()

        # Configure file handler
        if log_file and not log_to_console:
            log_config["handlers"]["file"] = {
                "level": log_level,
                "class": "logging.FileHandler",
                "filename": Path(log_file).expanduser(),
                "formatter": "file_format",
            }
            log_config["loggers"]["termpix"]["handlers"].append("file")

        # Configure console handler
        if log_to_console:
            console_level = log_level
        else:
            console_level = config.log_level_console.upper()
        log_config["handlers"]["console"]["level"] = console_level

        log_config["loggers"]["termpix"]["level"] = log_level

        # Update log_config based on additional config dict provided
        if config.log_config:
            dict_merge(log_config, config.log_config)

    logging.config.dictConfig(log_config)

    # Capture warnings so they show up in the logs
    logging.captureWarnings(True)

    # Log uncaught exceptions
    sys.excepthook = handle_exception
