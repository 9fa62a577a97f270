# src/taskdesk/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from typing import Any, cast

from ..core.errors import TaskdeskError
from ..core.state import AppContext
from ..tasks.task_models import Task, TaskStatus

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppContext, list[str]], str]
CommandHandler3 = Callable[[AppContext, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /add, ...)."""

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

    def handle(
        self,
        ctx: AppContext,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Task errors (validation, not found, storage) become a one-line reply.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}"
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

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(ctx, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(ctx, args)
        except TaskdeskError as e:
            logger.debug("Command /%s rejected: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument parsing ----

# key=value tokens accepted by /add and /edit -> task field
_FIELD_ALIASES: dict[str, str] = {
    "title": "title",
    "desc": "description",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "prio": "priority",
    "due": "due_date",
    "date": "due_date",
    "time": "due_time",
    "at": "due_time",
    "remind": "reminder_minutes",
    "remind_at": "reminder_time",
    "tags": "tags",
}

_FILTER_ALIASES: dict[str, str] = {
    "status": "status",
    "priority": "priority",
    "prio": "priority",
    "due": "due_date",
    "date": "due_date",
    "tag": "tag",
}


def _split_fields(tokens: list[str], aliases: dict[str, str]) -> tuple[dict[str, str], list[str]]:
    """Separate recognized key=value tokens from free words."""
    found: dict[str, str] = {}
    words: list[str] = []
    for tok in tokens:
        key, sep, value = tok.partition("=")
        if sep and key.lower() in aliases:
            found[aliases[key.lower()]] = value
        else:
            words.append(tok)
    return found, words


def _to_task_fields(raw: dict[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, value in raw.items():
        if name == "tags":
            out["tags"] = value.split(",")
        elif name == "reminder_minutes":
            if value.lower() in ("off", "no", "none"):
                out["reminder_enabled"] = False
                continue
            out["reminder_enabled"] = True
            try:
                out["reminder_minutes"] = int(value)
            except ValueError:
                out["reminder_minutes"] = value
        elif name == "reminder_time":
            out["reminder_enabled"] = True
            out["reminder_time"] = value
        else:
            out[name] = value
    return out


_STATUS_MARK = {
    TaskStatus.PENDING: "[ ]",
    TaskStatus.IN_PROGRESS: "[~]",
    TaskStatus.COMPLETED: "[x]",
}


def format_task(task: Task) -> str:
    mark = _STATUS_MARK.get(task.status, "[?]")
    parts = [f"{mark} {task.title}", f"({task.priority})"]
    if task.due_date:
        parts.append(f"due {task.due_date}{' ' + task.due_time if task.due_time else ''}")
    if task.reminder_enabled and task.reminder_time:
        parts.append(f"remind {task.reminder_time}{' (sent)' if task.reminder_notified else ''}")
    if task.tags:
        parts.append(" ".join(f"#{t}" for t in task.tags))
    return f"{task.id}  " + "  ".join(parts)


def format_task_list(tasks: list[Task], empty: str = "No tasks.") -> str:
    if not tasks:
        return empty
    return "\n".join(format_task(t) for t in tasks)


def _require_id(args: list[str], usage: str) -> str:
    if not args:
        raise TaskdeskError(f"Usage: {usage}")
    return args[0]


# ---- handlers ----


def cmd_help(ctx: AppContext, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(ctx: AppContext, args: list[str]) -> str:
    """
    /add Buy milk priority=high due=2024-01-15 time=18:00 remind=30 tags=home,shop
    """
    raw, words = _split_fields(args, _FIELD_ALIASES)
    data = _to_task_fields(raw)
    if words and "title" not in data:
        data["title"] = " ".join(words)
    task = ctx.commands.add(data)
    return f"Added: {format_task(task)}"


def cmd_list(ctx: AppContext, args: list[str]) -> str:
    return format_task_list(ctx.commands.list())


def cmd_show(ctx: AppContext, args: list[str]) -> str:
    task_id = _require_id(args, "/show <id>")
    task = ctx.commands.get(task_id)
    if task is None:
        return f"No task with id {task_id}."
    lines = [format_task(task)]
    if task.description:
        lines.append(f"  {task.description}")
    lines.append(f"  created {task.created_at.isoformat()}  updated {task.updated_at.isoformat()}")
    return "\n".join(lines)


def cmd_edit(ctx: AppContext, args: list[str]) -> str:
    task_id = _require_id(args, "/edit <id> key=value ...")
    raw, words = _split_fields(args[1:], _FIELD_ALIASES)
    if words:
        return f"Unrecognized arguments: {' '.join(words)}"
    if not raw:
        return "Nothing to change. Fields: " + ", ".join(sorted(_FIELD_ALIASES))
    task = ctx.commands.update(task_id, _to_task_fields(raw))
    return f"Updated: {format_task(task)}"


def _set_status(ctx: AppContext, args: list[str], status: TaskStatus, usage: str) -> str:
    task_id = _require_id(args, usage)
    task = ctx.commands.update(task_id, {"status": status})
    return f"Updated: {format_task(task)}"


def cmd_done(ctx: AppContext, args: list[str]) -> str:
    return _set_status(ctx, args, TaskStatus.COMPLETED, "/done <id>")


def cmd_start(ctx: AppContext, args: list[str]) -> str:
    return _set_status(ctx, args, TaskStatus.IN_PROGRESS, "/start <id>")


def cmd_toggle(ctx: AppContext, args: list[str]) -> str:
    task = ctx.commands.toggle(_require_id(args, "/toggle <id>"))
    return f"Updated: {format_task(task)}"


def cmd_rm(ctx: AppContext, args: list[str]) -> str:
    task_id = _require_id(args, "/rm <id>")
    ctx.commands.delete(task_id)
    return f"Deleted {task_id}."


def cmd_filter(ctx: AppContext, args: list[str]) -> str:
    raw, words = _split_fields(args, _FILTER_ALIASES)
    if words:
        return "Usage: /filter status=pending priority=high due=2024-01-15 tag=home"
    return format_task_list(ctx.commands.filter(raw), empty="No matching tasks.")


def cmd_search(ctx: AppContext, args: list[str]) -> str:
    return format_task_list(ctx.commands.search(" ".join(args)), empty="No matching tasks.")


def cmd_stats(ctx: AppContext, args: list[str]) -> str:
    s = ctx.commands.stats()
    return (
        "Stats:\n"
        f"  Total: {s.total}\n"
        f"  Pending: {s.pending}\n"
        f"  In progress: {s.in_progress}\n"
        f"  Completed: {s.completed}\n"
        f"  High priority: {s.high_priority}"
    )


def cmd_reminders(ctx: AppContext, args: list[str]) -> str:
    upcoming = ctx.reminders.get_upcoming_reminders()
    return format_task_list(upcoming, empty="No upcoming reminders.")


def cmd_whoami(ctx: AppContext, args: list[str]) -> str:
    if ctx.user is None:
        return "Not signed in (auth gate disabled)."
    return f"Signed in as {ctx.user.display_name} <{ctx.user.email}>"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> [priority=high due=YYYY-MM-DD time=HH:MM remind=MIN tags=a,b]",
)
registry.register("list", cmd_list, help_text="List all tasks.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show one task: /show <id>")
registry.register("edit", cmd_edit, help_text="Edit fields: /edit <id> key=value ...")
registry.register("done", cmd_done, help_text="Mark completed: /done <id>")
registry.register("start", cmd_start, help_text="Mark in progress: /start <id>")
registry.register("toggle", cmd_toggle, help_text="Toggle completed/pending: /toggle <id>")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>", aliases=["delete"])
registry.register("filter", cmd_filter, help_text="Filter: /filter status=.. priority=.. due=.. tag=..")
registry.register("search", cmd_search, help_text="Search title/description/tags: /search <text>")
registry.register("stats", cmd_stats, help_text="Task counts.")
registry.register("reminders", cmd_reminders, help_text="Upcoming reminders, soonest first.")
registry.register("whoami", cmd_whoami, help_text="Show the signed-in user.")
