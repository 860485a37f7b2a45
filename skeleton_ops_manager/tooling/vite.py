"""Runs the Vite bundler."""

from pathlib import Path

from skeleton_ops_manager.tooling.process import run_command


def vite_build(project_dir: Path, mode: str = "prod", env: dict[str, str] | None = None) -> None:
    """Build the project for `mode`; the build writes `./dist` and `./.~dist.zip`."""
    run_command("npx", ["vite", "build", "--mode", mode], cwd=project_dir, env=env)
