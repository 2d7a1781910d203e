# src/things3_query/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import json
import logging
from collections.abc import Callable
from typing import Any, cast

from ..core.state import AppState
from ..tasks.filters import parse_bucket, parse_day, parse_search_field
from ..tasks.task_api import (
    container_to_dict,
    format_task_detail,
    format_task_line,
    tag_to_dict,
    task_to_dict,
)
from ..tasks.task_models import Bucket, SearchField, Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_INCLUDE_COMPLETED_ARGS = {"completed", "--completed", "--all"}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /today, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Things3QueryError from a handler propagates to the caller.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def _render_tasks(state: AppState, tasks: list[Task], header: str, **extra: Any) -> str:
    if state.json_output:
        payload = {"success": True, "count": len(tasks), **extra, "tasks": [task_to_dict(t) for t in tasks]}
        return json.dumps(payload, ensure_ascii=False, indent=2)
    if not tasks:
        return f"{header}: no tasks."
    lines = [f"{header} ({len(tasks)}):"]
    lines.extend(f"{i}. {format_task_line(t)}" for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


def _split_include_completed(args: list[str]) -> tuple[list[str], bool]:
    rest = [a for a in args if a.lower() not in _INCLUDE_COMPLETED_ARGS]
    return rest, len(rest) != len(args)


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    db_path = getattr(state.store, "db_path", None)
    return (
        "Status:\n"
        f"  Database: {db_path or '(unknown)'}\n"
        f"  Date offset (days): {state.engine.codec.offset_days}\n"
        f"  Someday area: {getattr(settings, 'someday_area', 'Someday')}\n"
        f"  Output: {'JSON' if state.json_output else 'TEXT'}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                -> all open tasks
    /list today          -> one list (today/tomorrow/upcoming/anytime/someday/inbox)
    /list upcoming completed -> include completed tasks
    """
    rest, include_completed = _split_include_completed(args)
    bucket = parse_bucket(rest[0]) if rest else Bucket.ALL
    tasks = state.engine.list_bucket(bucket, include_completed)
    return _render_tasks(state, tasks, bucket.value.capitalize(), filter=bucket.value)


def _bucket_command(bucket: Bucket) -> CommandHandler2:
    def handler(state: AppState, args: list[str]) -> str:
        return cmd_list(state, [bucket.value, *args])

    handler.__name__ = f"cmd_{bucket.value}"
    return handler


def cmd_date(state: AppState, args: list[str]) -> str:
    rest, include_completed = _split_include_completed(args)
    if not rest:
        return "Usage: /date YYYY-MM-DD [completed]"
    day = parse_day(rest[0], "date")
    tasks = state.engine.list_date(day, include_completed)
    return _render_tasks(state, tasks, day.isoformat(), date=day.isoformat())


def cmd_range(state: AppState, args: list[str]) -> str:
    rest, include_completed = _split_include_completed(args)
    if len(rest) < 2:
        return "Usage: /range START END [completed]   (dates as YYYY-MM-DD, END inclusive)"
    start = parse_day(rest[0], "start")
    end = parse_day(rest[1], "end")
    tasks = state.engine.list_range(start, end, include_completed)
    return _render_tasks(
        state,
        tasks,
        f"{start.isoformat()} .. {end.isoformat()}",
        start_date=start.isoformat(),
        end_date=end.isoformat(),
    )


def cmd_search(state: AppState, args: list[str]) -> str:
    """
    /search words...          -> title or notes
    /search title: words...   -> title only (also notes: / both:)
    """
    if not args:
        return "Usage: /search [title:|notes:|both:] text"
    search_in = SearchField.BOTH
    head = args[0]
    if head.endswith(":"):
        search_in = parse_search_field(head[:-1])
        args = args[1:]
    text = " ".join(args)
    tasks = state.engine.search(text, search_in)
    return _render_tasks(state, tasks, f"Search {text!r}", query=text)


def cmd_get(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /get TASK_ID"
    task = state.engine.get(args[0])
    if task is None:
        if state.json_output:
            return json.dumps({"success": False, "error": "Task not found", "task_id": args[0]}, indent=2)
        return f"Task not found: {args[0]}"
    if state.json_output:
        return json.dumps({"success": True, "task": task_to_dict(task, detailed=True)}, ensure_ascii=False, indent=2)
    return format_task_detail(task)


def cmd_projects(state: AppState, args: list[str]) -> str:
    include_areas = not any(a.lower() in ("noareas", "--no-areas") for a in args)
    items = state.engine.list_containers(include_areas)
    if state.json_output:
        return json.dumps(
            {"success": True, "count": len(items), "items": [container_to_dict(i) for i in items]},
            ensure_ascii=False,
            indent=2,
        )
    if not items:
        return "No projects or areas."
    return "\n".join(f"[{i.kind}] {i.title}  ({i.id})" for i in items)


def cmd_tags(state: AppState, args: list[str]) -> str:
    tags = state.engine.list_tags()
    if state.json_output:
        return json.dumps(
            {"success": True, "count": len(tags), "tags": [tag_to_dict(t) for t in tags]},
            ensure_ascii=False,
            indent=2,
        )
    if not tags:
        return "No tags."
    return "\n".join(f"#{t.title}  ({t.id})" for t in tags)


def cmd_json(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /json      -> show output mode
    /json on   -> JSON output
    /json off  -> text output
    """
    if not args:
        return f"JSON output is currently {'ON' if state.json_output else 'OFF'}. Use /json on or /json off."

    arg = args[0].lower()
    if arg in ("on", "1", "true", "yes"):
        state.json_output = True
    elif arg in ("off", "0", "false", "no"):
        state.json_output = False
    else:
        return "Usage: /json on or /json off."

    if emit:
        with contextlib.suppress(Exception):
            emit(f"[OUTPUT] {'JSON' if state.json_output else 'TEXT'}")
    logger.debug("Output mode json=%s", state.json_output)
    return f"JSON output {'enabled' if state.json_output else 'disabled'}."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show database path and settings.")
registry.register("list", cmd_list, help_text="List tasks: /list [all|today|tomorrow|upcoming|anytime|someday|inbox] [completed].")
for _bucket in Bucket:
    if _bucket is not Bucket.ALL:
        registry.register(_bucket.value, _bucket_command(_bucket), help_text=f"Shortcut for /list {_bucket.value}.")
registry.register("date", cmd_date, help_text="Tasks scheduled on a day: /date YYYY-MM-DD [completed].")
registry.register("range", cmd_range, help_text="Tasks scheduled in a range: /range START END [completed].")
registry.register("search", cmd_search, help_text="Search open tasks: /search [title:|notes:|both:] text.", aliases=["s"])
registry.register("get", cmd_get, help_text="Show one task with details: /get TASK_ID.")
registry.register("projects", cmd_projects, help_text="List areas and open projects: /projects [noareas].")
registry.register("tags", cmd_tags, help_text="List tags.")
registry.register("json", cmd_json, help_text="Toggle JSON output: /json on | /json off.")
