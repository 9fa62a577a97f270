# src/taskdesk/cli/main.py

"""
CLI entrypoint.

Initializes logging, resolves the session (auth gate), builds AppContext, then starts:
- the reminder service in a background thread (optional),
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import sys
import threading

from ..auth.session import AuthRequiredError
from ..cli.bootstrap import build_session, create_context
from ..cli.reminder_runner import ReminderBackgroundRunner, start_reminders_in_background
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import StorageError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    session = build_session(settings)
    user = None
    if session is None:
        logger.warning("Auth API not configured (TASKDESK_AUTH_BASE_URL); running without a session gate.")
    else:
        try:
            user = session.require_auth()
        except AuthRequiredError as e:
            logger.error("%s", e)
            session.close()
            sys.exit(2)

    try:
        ctx = create_context(settings=settings)
    except StorageError:
        logger.exception("Task storage is unavailable.")
        sys.exit(1)
    ctx.user = user

    runner: ReminderBackgroundRunner | None = None
    if settings.reminders_enabled:
        runner = start_reminders_in_background(ctx.reminders)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Not in the main thread, or the platform lacks SIGTERM.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(ctx)
            stop_main.set()
        else:
            logger.info("Console disabled. Running reminders only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=10.0)
        if session is not None:
            session.close()
        logger.info("Bye.")


if __name__ == "__main__":
    main()
