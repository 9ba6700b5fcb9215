# src/subchain/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..roles.role import Role
from ..tasks.task import Task
from ..tasks.task_models import ExecutionOrder, TaskStatus

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

MIN_ID_PREFIX = 4


class CommandError(Exception):
    """User-facing command failure (bad arguments, unknown ids)."""


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tree, ...)."""

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

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
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
            return handler(state, args)
        except CommandError as e:
            return str(e)
        except NotImplementedError as e:
            return f"Not supported: {e}"
        except KeyError as e:
            logger.debug("/%s lookup failed: %r", name, e)
            return f"Not found: {e.args[0] if e.args else name}"
        except (IndexError, ValueError) as e:
            logger.debug("/%s rejected: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- lookup helpers ----


def _resolve_role(state: AppState, ref: str) -> Role:
    """Find a stored role by exact name or unique id prefix."""
    roles = state.role_store.list_roles()
    by_name = [rid for rid, name in roles if name.lower() == ref.lower()]
    if len(by_name) == 1:
        return state.role_store.load_role(by_name[0])

    if len(ref) < MIN_ID_PREFIX:
        raise CommandError(f"No role named {ref!r}.")
    by_id = [rid for rid, _ in roles if rid.startswith(ref)]
    if not by_id:
        raise CommandError(f"No role matches {ref!r}.")
    if len(by_id) > 1:
        raise CommandError(f"Role id prefix {ref!r} is ambiguous.")
    return state.role_store.load_role(by_id[0])


def _resolve_task(role: Role, ref: str) -> Task:
    if ref.lower() == "root":
        return role.root_task
    if len(ref) < MIN_ID_PREFIX:
        raise CommandError(f"Task id prefix must have at least {MIN_ID_PREFIX} characters.")
    matches = [t for t in role.root_task.walk() if t.id.startswith(ref)]
    if not matches:
        raise CommandError(f"No task matches {ref!r} in role {role.name!r}.")
    if len(matches) > 1:
        raise CommandError(f"Task id prefix {ref!r} is ambiguous.")
    return matches[0]


def _parse_minutes(raw: str) -> int:
    try:
        minutes = int(raw)
    except ValueError:
        raise CommandError(f"Expected minutes as a whole number, got {raw!r}.") from None
    if minutes < 0:
        raise CommandError("Minutes cannot be negative.")
    return minutes


def render_tree(task: Task) -> str:
    """One line per task: [AC] flags, name, duration, status and short id."""
    lines: list[str] = []
    base = task.depth
    for t in task.walk():
        flags = ("A" if t.is_active else "-") + ("C" if t.is_critical else "-")
        order = "" if t.is_leaf else f", {t.subtask_order.value}"
        lines.append(
            f"{'  ' * (t.depth - base)}[{flags}] {t.name} "
            f"({t.calculated_duration} min{order}) {t.status.value} #{t.id[:8]}"
        )
    return "\n".join(lines)


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_roles(state: AppState, args: list[str]) -> str:
    roles = state.role_store.list_roles()
    if not roles:
        return "No roles yet. Use /role <name> to create one."
    lines = ["Roles:"]
    for i, (rid, name) in enumerate(roles, start=1):
        lines.append(f"{i}. {name} #{rid[:8]}")
    return "\n".join(lines)


def cmd_role(state: AppState, args: list[str]) -> str:
    """
    /role <name>  -> create a role with an empty root task

    Role names are single words, as commands address roles by one token.
    """
    if not args:
        return "Usage: /role <name>"
    if len(args) > 1:
        raise CommandError(f"Role names cannot contain spaces; try {'-'.join(args)!r}.")
    role = Role(args[0])
    state.role_store.save_role(role)
    logger.info("Role created id=%s name=%s", role.id, role.name)
    return f"Role {role.name!r} created #{role.id[:8]}."


def cmd_drop(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /drop <role>"
    role = _resolve_role(state, args[0])
    state.role_store.delete_role(role.id)
    return f"Role {role.name!r} deleted."


def cmd_tree(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /tree <role>"
    role = _resolve_role(state, args[0])
    return f"{role.name}:\n{render_tree(role.root_task)}"


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <role> <parent|root> <minutes> <name...>
    """
    if len(args) < 4:
        return "Usage: /add <role> <parent|root> <minutes> <name>"
    role = _resolve_role(state, args[0])
    parent = _resolve_task(role, args[1])
    task = Task(" ".join(args[3:]), expected_duration=_parse_minutes(args[2]))
    parent.add_subtask(task)
    state.role_store.save_role(role)
    return f"Added {task.name!r} #{task.id[:8]} under {parent.name!r}."


def cmd_move(state: AppState, args: list[str]) -> str:
    """
    /move <role> <task> <index>  -> reorder a task among its siblings
    """
    if len(args) != 3:
        return "Usage: /move <role> <task> <index>"
    role = _resolve_role(state, args[0])
    task = _resolve_task(role, args[1])
    if task.parent is None:
        raise CommandError("The root task cannot be moved.")
    try:
        index = int(args[2])
    except ValueError:
        raise CommandError(f"Expected a position, got {args[2]!r}.") from None
    task.parent.insert_subtask(task, index)
    state.role_store.save_role(role)
    return render_tree(role.root_task)


def cmd_order(state: AppState, args: list[str]) -> str:
    """
    /order <role> <task|root> series|parallel
    """
    if len(args) != 3:
        return "Usage: /order <role> <task|root> series|parallel"
    role = _resolve_role(state, args[0])
    task = _resolve_task(role, args[1])
    task.subtask_order = ExecutionOrder.parse(args[2])
    state.role_store.save_role(role)
    return render_tree(role.root_task)


def cmd_status(state: AppState, args: list[str]) -> str:
    """
    /status <role> <task> not_started|in_progress|complete
    """
    if len(args) != 3:
        return "Usage: /status <role> <task> not_started|in_progress|complete"
    role = _resolve_role(state, args[0])
    task = _resolve_task(role, args[1])
    task.status = TaskStatus.parse(args[2])
    state.role_store.save_role(role)
    return f"{task.name!r} is now {task.status.value}."


def cmd_toggle(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /toggle <role> <task>"
    role = _resolve_role(state, args[0])
    task = _resolve_task(role, args[1])
    task.toggle_status()
    state.role_store.save_role(role)
    return f"{task.name!r} is now {task.status.value}."


def cmd_remove(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /remove <role> <task>"
    role = _resolve_role(state, args[0])
    task = _resolve_task(role, args[1])
    if task.parent is None:
        raise CommandError("The root task cannot be removed.")
    task.parent.remove_subtask(task)
    state.role_store.save_role(role)
    return f"Removed {task.name!r} and {sum(1 for _ in task.walk()) - 1} subtask(s)."


def cmd_next(state: AppState, args: list[str]) -> str:
    """
    /next <role>  -> leaves on the active path, critical ones marked with *
    """
    if len(args) != 1:
        return "Usage: /next <role>"
    role = _resolve_role(state, args[0])
    leaves = [t for t in role.root_task.active_leaves() if t is not role.root_task]
    if not leaves:
        return f"Nothing to do in {role.name!r}."
    lines = [f"Next in {role.name} ({role.root_task.calculated_duration} min total):"]
    for t in leaves:
        mark = "*" if t.is_critical else " "
        lines.append(f" {mark} {t.name} ({t.expected_duration} min, active {t.active_time} min) #{t.id[:8]}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("roles", cmd_roles, help_text="List roles.")
registry.register("role", cmd_role, help_text="Create a role: /role <name> (one word).")
registry.register("drop", cmd_drop, help_text="Delete a role: /drop <role>.")
registry.register("tree", cmd_tree, help_text="Show a role's task tree with [A]ctive/[C]ritical flags.")
registry.register("add", cmd_add, help_text="Add a task: /add <role> <parent|root> <minutes> <name>.")
registry.register("move", cmd_move, help_text="Reorder a task among its siblings: /move <role> <task> <index>.")
registry.register("order", cmd_order, help_text="Set subtask order: /order <role> <task|root> series|parallel.")
registry.register("status", cmd_status, help_text="Set status: /status <role> <task> <status>.")
registry.register("toggle", cmd_toggle, help_text="Cycle a task's status: /toggle <role> <task>.")
registry.register("remove", cmd_remove, help_text="Remove a task and its subtasks: /remove <role> <task>.")
registry.register("next", cmd_next, help_text="What to work on next: /next <role>.")
