"""General utility functions and helper classes."""

import re
import sys
from typing import Any

from skeleton_ops_manager.configuration.env import Settings


def get_path(data: dict[str, Any], path: str, default: Any = None) -> Any:
    """Read a dotted path (e.g. `config.c10n.&.github.labels`) out of nested dicts."""
    current: Any = data
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return default
        current = current[segment]
    return current


def set_path(data: dict[str, Any], path: str, value: Any) -> None:
    """Write a value at a dotted path, creating (or replacing non-dict) intermediate levels."""
    segments = path.split(".")
    current = data
    for segment in segments[:-1]:
        if not isinstance(current.get(segment), dict):
            current[segment] = {}
        current = current[segment]
    current[segments[-1]] = value


def escape_env_value(value: Any) -> str:
    """Escape a value for a double-quoted dotenv line."""
    text = str(value)
    text = re.sub(r"\r\n?", "\n", text)
    text = text.replace("\n", "\\n")
    return text.replace('"', '\\"')


def format_env_file(env_name: str, values: dict[str, Any]) -> str:
    """Render an env file: a `# <env>` header followed by `NAME="value"` lines."""
    lines = [f"# {env_name}"]
    lines.extend(f'{name}="{escape_env_value(value)}"' for name, value in values.items())
    return "\n".join(lines) + "\n"


def with_robotic_suffix(message: str, suffix: str = "[robotic]") -> str:
    """Append the robotic marker to a commit or tag message."""
    separator = "" if message.endswith("]") else " "
    return f"{message}{separator}{suffix}"


def is_interactive(settings: Settings, stdout_isatty: bool | None = None) -> bool:
    """Whether we are attached to a real terminal (and not running in CI)."""
    if stdout_isatty is None:
        stdout_isatty = sys.stdout.isatty()
    is_tty = stdout_isatty or settings.PARENT_IS_TTY
    term = settings.TERM or ""
    return is_tty and bool(term) and term != "dumb" and not settings.CI
