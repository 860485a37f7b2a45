"""Wrapper around the dotenv-vault command line interface."""

from pathlib import Path
from typing import Callable
from urllib.parse import parse_qs, urlsplit

import structlog

from skeleton_ops_manager.configuration.exceptions import PreconditionError
from skeleton_ops_manager.tooling.process import run_command
from skeleton_ops_manager.utils.constants import DOTENV_KEY_PATTERN

logger = structlog.get_logger(__name__)

Runner = Callable[..., str]


def environment_from_key(key: str) -> str:
    """Environment name carried by a decryption key's `environment=` query parameter."""
    values = parse_qs(urlsplit(key).query).get("environment", [])
    return values[0] if values else ""


class DotenvVaultCli:
    """Runs `npx dotenv-vault` subcommands in the project directory."""

    def __init__(self, project_dir: Path, runner: Runner = run_command) -> None:
        self.project_dir = project_dir
        self.runner = runner

    def _run(self, args: list[str], quiet: bool = False) -> str:
        return self.runner("npx", ["dotenv-vault", *args], cwd=self.project_dir, quiet=quiet)

    def push(self, env_name: str, env_file: Path) -> None:
        self._run(["push", env_name, str(env_file), "--yes"])

    def pull(self, env_name: str, env_file: Path) -> None:
        self._run(["pull", env_name, str(env_file), "--yes"])

    def build(self) -> None:
        """Encrypt every environment into `.env.vault`."""
        self._run(["build", "--yes"])

    def keys_output(self, quiet: bool = True) -> str:
        return self._run(["keys", "--yes"], quiet=quiet)

    def extract_keys(self, expected_envs: list[str]) -> dict[str, str]:
        """Decryption keys keyed by environment name.

        Raises:
            PreconditionError: Unless exactly one key was found per expected environment.
        """
        output = self.keys_output()
        keys = {match.group(1): match.group(0) for match in DOTENV_KEY_PATTERN.finditer(output)}
        if sorted(keys) != sorted(expected_envs):
            raise PreconditionError(f"Failed to extract Dotenv Vault keys; expected {sorted(expected_envs)}, found {sorted(keys)}.")
        return keys

    def decrypt(self, key: str) -> str:
        """Decrypted dotenv content of the environment a key belongs to."""
        return self._run(["decrypt", key], quiet=True)
