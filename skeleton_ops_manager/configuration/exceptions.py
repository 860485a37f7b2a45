"""Contains exceptions raised by the application.

Everything the CLI reports as a single terminal error derives from SkeletonOpsError.
"""


class SkeletonOpsError(Exception):
    """Base class for errors that abort an operation before completion."""

    pass


class GitHubAuthenticationConfigurationUndefinedError(SkeletonOpsError):
    """Raised when the GitHub authentication configuration is undefined."""

    pass


class RequiredConfigurationElementError(SkeletonOpsError):
    """Raised when a required configuration element is missing."""

    def __init__(self, name: str, cli_name: str, env_name: str) -> None:
        """Initializes the exception with the name of the missing element."""
        super().__init__(f"Missing required configuration element: {name} (command line option {cli_name}, environment variable {env_name})")
        self.name = name
        self.cli_name = cli_name
        self.env_name = env_name


class PreconditionError(SkeletonOpsError):
    """Raised when required local or remote state is missing; nothing has been mutated."""

    pass


class RemoteResponseShapeError(PreconditionError):
    """Raised when a remote response does not have the shape we expect."""

    def __init__(self, source: str, detail: str) -> None:
        """Initializes the exception with the call that produced the bad response."""
        super().__init__(f"Unexpected response shape from {source}: {detail}")
        self.source = source
        self.detail = detail


class RemoteValidationError(SkeletonOpsError):
    """Raised when GitHub rejects a mutation with 422 Unprocessable Entity."""

    def __init__(self, function: str, message: str, errors: list[dict] | None = None, url: str | None = None) -> None:
        """Initializes the exception with GitHub's error payload."""
        super().__init__(f"GitHub 422 error in {function}: {message} | errors: {errors or []} | url: {url}")
        self.function = function
        self.message = message
        self.errors = errors or []
        self.url = url


class CommandError(SkeletonOpsError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stdout: str = "", stderr: str = "") -> None:
        """Initializes the exception with the failed command and its output."""
        super().__init__(f"Command {' '.join(command)!r} failed with exit code {returncode}: {stderr.strip() or stdout.strip()}")
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
