"""Contains synchronization logic for GitHub environment secrets."""

from skeleton_ops_manager.github.abc import GitHubClientBase
from skeleton_ops_manager.github.crypto import encrypt_secret
from skeleton_ops_manager.github.records import PublicKeyRecord, SecretRecord
from skeleton_ops_manager.synchronize.models import ReconciliationAction
from skeleton_ops_manager.synchronize.reconciler import reconcile


def desired_environment_secrets(environment_name: str, dotenv_keys: dict[str, str]) -> dict[str, str]:
    """Secrets an environment must hold: the `main` key plus the environment's own key."""
    return {
        "USER_DOTENV_KEY_MAIN": dotenv_keys["main"],
        f"USER_DOTENV_KEY_{environment_name.upper()}": dotenv_keys[environment_name],
    }


async def sync_github_environment_secrets(
    github_adapter: GitHubClientBase,
    environment_name: str,
    desired: dict[str, str],
    dry_run: bool = False,
) -> list[ReconciliationAction]:
    """Converge an environment's secrets to `desired` (name to plaintext value).

    Values are sealed with the environment's public key right before each write.
    """
    public_key: PublicKeyRecord | None = None

    async def put(secret_name: str, value: str) -> None:
        nonlocal public_key
        if public_key is None:
            public_key = await github_adapter.get_environment_public_key(environment_name)
        await github_adapter.put_environment_secret(
            environment_name,
            secret_name,
            encrypted_value=encrypt_secret(public_key.key, value),
            key_id=public_key.key_id,
        )

    async def delete(secret_name: str, _: SecretRecord) -> None:
        await github_adapter.delete_environment_secret(environment_name, secret_name)

    return await reconcile(
        desired,
        github_adapter.iter_environment_secrets(environment_name),
        key=lambda secret: secret.name,
        create=put,
        update=put,
        delete=delete,
        dry_run=dry_run,
        resource=f"`{environment_name}` environment secret",
    )
