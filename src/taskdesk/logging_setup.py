# src/taskdesk/logging_setup.py

from __future__ import annotations

"""
Logging for the taskdesk console.

The console shares the terminal with the REPL prompt and with reminder
printouts, so its handler only shows task activity and real problems. The
file handler under the data dir keeps everything, including every reminder
tick, for post-mortem debugging.
"""

import logging
import sys
from pathlib import Path

REMINDER_LOGGER = "taskdesk.tasks.reminder_service"
HTTP_LOGGERS = ("httpx", "httpcore")
LOG_FILE_NAME = "taskdesk.log"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the prompt readable while tasks are being edited.

    Task add/update/delete records pass. The reminder loop ticks every interval
    and only surfaces failed deliveries (WARNING+). Session and webhook calls go
    through httpx, whose request lines stay in the file unless something breaks.
    Captured py.warnings and other libraries need ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("taskdesk."):
            if name.startswith(REMINDER_LOGGER):
                return record.levelno >= logging.WARNING
            return True

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        if name.startswith(HTTP_LOGGERS):
            return record.levelno >= logging.WARNING

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskdesk",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Attach the filtered stderr handler and the `<log_dir>/taskdesk.log` handler.

    Called once from `taskdesk.cli.main` before settings-driven services start,
    so the store and session client log their startup lines.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
