"""Pydantic Settings model for application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable settings for the application.

    Options that the CLI exposes are read through their Typer `envvar`; these are
    the settings consumed outside of option parsing.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Terminal detection
    CI: bool = False
    TERM: str | None = None
    PARENT_IS_TTY: bool = False

    # dotenv-vault decryption keys, used when running non-interactively
    USER_DOTENV_KEY_MAIN: str | None = None
    USER_DOTENV_KEY_DEV: str | None = None
    USER_DOTENV_KEY_CI: str | None = None
    USER_DOTENV_KEY_STAGE: str | None = None
    USER_DOTENV_KEY_PROD: str | None = None

    def dotenv_key(self, env_name: str) -> str | None:
        """Return the decryption key configured for an environment, if any."""
        return getattr(self, f"USER_DOTENV_KEY_{env_name.upper()}", None)
