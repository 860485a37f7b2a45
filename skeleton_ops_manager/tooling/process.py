"""Runs external command line tools (git, npm, npx) for the project."""

import os
import subprocess
import sys
from pathlib import Path

import structlog
import typer

from skeleton_ops_manager.configuration.exceptions import CommandError

logger = structlog.get_logger(__name__)


def run_command(
    cmd: str,
    args: list[str] | None = None,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    quiet: bool = False,
) -> str:
    """Run a command and return its stdout.

    `env` is overlaid on a copy of the current environment for the child only; the
    parent process environment is never modified. Output is echoed unless `quiet`.

    Raises:
        CommandError: If the command exits with a non-zero status.
    """
    command = [cmd, *(args or [])]
    child_env = {**os.environ, **(env or {})}
    if sys.stdout.isatty() or child_env.get("PARENT_IS_TTY", "").lower() in ("1", "true"):
        child_env["PARENT_IS_TTY"] = "true"

    logger.debug("Running command", command=command, cwd=str(cwd) if cwd else None)
    try:
        result = subprocess.run(command, cwd=cwd, env=child_env, capture_output=True, text=True, check=False)
    except FileNotFoundError as exc:
        raise CommandError(command, 127, stderr=str(exc)) from exc

    stdout = result.stdout or ""
    stderr = result.stderr or ""
    if not quiet:
        if stdout:
            typer.echo(stdout, nl=False)
        if stderr:
            typer.echo(typer.style(stderr, fg=typer.colors.BRIGHT_BLACK), nl=False, err=True)
    if result.returncode != 0:
        raise CommandError(command, result.returncode, stdout=stdout, stderr=stderr)
    return stdout
