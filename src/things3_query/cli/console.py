# src/things3_query/cli/console.py

from __future__ import annotations

import logging
from datetime import datetime

from ..core.state import AppState
from ..errors import Things3QueryError
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def run_command(state: AppState, line: str) -> tuple[str, bool]:
    """
    Run one console line. Returns (reply, ok).

    Query errors become a readable reply; anything unexpected is logged and reported.
    """
    text = line.strip()
    if text and not text.startswith("/"):
        text = "/" + text

    def emit(msg: str) -> None:
        print(f"[{_ts_local()}] {msg}", flush=True)

    try:
        reply = command_registry.handle(state, text, emit=emit)
    except Things3QueryError as exc:
        logger.debug("Command rejected: %s", exc)
        return f"Error: {exc}", False
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command.", False

    if reply is None:
        return "Empty command. Use /help to list available commands.", False
    return reply, True


def run_console_loop(state: AppState) -> None:
    logger.info("Console started (json=%s).", state.json_output)
    print(f"[{_ts_local()}] Type a command. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input("things> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit", "exit", "quit"):
            logger.info("Console exit command received.")
            break

        reply, _ = run_command(state, user_input)
        print(reply)
