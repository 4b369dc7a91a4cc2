"""Encryption of Actions secrets.

GitHub only accepts secret values sealed with a libsodium sealed box
against the repository public key.
See https://docs.github.com/en/rest/guides/encrypting-secrets-for-the-rest-api
"""

from nacl import encoding, exceptions, public

from repo_foundry.productionalization.errors import EncryptionError


def seal_secret(public_key: str, secret_value: str) -> str:
    """Seal ``secret_value`` for the holder of ``public_key``.

    Args:
        public_key: Base64-encoded Curve25519 public key
        secret_value: Plaintext to encrypt

    Returns:
        Base64-encoded ciphertext; differs on every call
    """
    try:
        key = public.PublicKey(public_key.encode("utf-8"), encoding.Base64Encoder)
        sealed = public.SealedBox(key).encrypt(secret_value.encode("utf-8"))
    except (exceptions.CryptoError, ValueError, TypeError) as exc:
        raise EncryptionError(f"Failed to encrypt secret: {exc}") from exc
    return encoding.Base64Encoder.encode(sealed).decode("utf-8")
