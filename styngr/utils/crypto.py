"""
Per-user encryption of track asset keys.

A client only ever receives an asset key encrypted with a key derived from
the server secret and its own user id, so a key leaked from one client is
useless to any other.
"""

import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

KDF_ITERATIONS = 100_000
SALT_PREFIX = b"styngr-user:"


class KeyEncryptor:
    """Encrypts strings for a single user id."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("An encryption secret is required")
        self._secret = secret.encode()
        self._fernets: dict[int, Fernet] = {}

    def _fernet_for(self, user_id: int) -> Fernet:
        """Derive (and cache) the Fernet instance for a user."""
        if user_id not in self._fernets:
            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA256(),
                length=32,
                salt=SALT_PREFIX + str(user_id).encode(),
                iterations=KDF_ITERATIONS,
            )
            key = base64.urlsafe_b64encode(kdf.derive(self._secret))
            self._fernets[user_id] = Fernet(key)
        return self._fernets[user_id]

    def encrypt_for_user(self, value: str, user_id: int) -> str:
        return self._fernet_for(user_id).encrypt(value.encode()).decode()

    def decrypt_for_user(self, token: str, user_id: int) -> str | None:
        """Decrypt a value; returns None when it was not encrypted for this user."""
        try:
            return self._fernet_for(user_id).decrypt(token.encode()).decode()
        except InvalidToken:
            return None
