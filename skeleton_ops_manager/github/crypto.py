"""Seals secret values for submission to the GitHub secrets API."""

from nacl import encoding, public


def encrypt_secret(public_key: str, secret_value: str) -> str:
    """Encrypt a secret with a base64 repository/environment public key (libsodium sealed box).

    Returns the base64 ciphertext expected as `encrypted_value`.
    """
    key = public.PublicKey(public_key.encode("utf-8"), encoding.Base64Encoder)
    sealed_box = public.SealedBox(key)
    return encoding.Base64Encoder().encode(sealed_box.encrypt(secret_value.encode("utf-8"))).decode("utf-8")
