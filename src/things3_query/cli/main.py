# src/things3_query/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- runs the command given on the command line once (e.g. `things3-query today`), or
- starts the interactive console.
"""

from __future__ import annotations

import logging
import sys

from ..config import get_settings
from ..errors import StoreUnavailable
from ..logging_setup import setup_logging
from .bootstrap import create_initial_state
from .console import run_command, run_console_loop

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=getattr(settings, "data_dir", ".local/things3-query"), console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "things3-query"))

    try:
        state = create_initial_state(settings=settings)
    except StoreUnavailable as exc:
        logger.error("Cannot start: %s", exc)
        return 1

    args = sys.argv[1:] if argv is None else argv
    try:
        if args:
            reply, ok = run_command(state, " ".join(args))
            print(reply)
            return 0 if ok else 1
        run_console_loop(state)
        return 0
    finally:
        state.store.close()
        logger.info("Bye.")


if __name__ == "__main__":
    sys.exit(main())
