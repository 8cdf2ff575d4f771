"""At-rest encryption of storage credentials using Fernet."""

import stat
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken

from tubecast.utils.errors import EncryptionError


class CredentialEncryptor:
    """Encrypts the access and secret keys written to ``config.json``.

    The Fernet key lives next to the config in a file readable only by its
    owner. It is generated on first use.
    """

    def __init__(self, key_path: Path) -> None:
        self.key_path = key_path
        self._cipher: Fernet | None = None

    def _load_or_create_key(self) -> bytes:
        if self.key_path.exists():
            mode = stat.S_IMODE(self.key_path.stat().st_mode)
            if mode & (stat.S_IRGRP | stat.S_IROTH | stat.S_IWGRP | stat.S_IWOTH):
                raise EncryptionError(
                    f"Key file {self.key_path} has insecure permissions ({oct(mode)}). "
                    f"Run: chmod 600 {self.key_path}"
                )
            return self.key_path.read_bytes()

        key = Fernet.generate_key()
        self.key_path.parent.mkdir(parents=True, exist_ok=True)
        self.key_path.write_bytes(key)
        self.key_path.chmod(0o600)
        return key

    @property
    def cipher(self) -> Fernet:
        if self._cipher is None:
            self._cipher = Fernet(self._load_or_create_key())
        return self._cipher

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a credential. Empty strings stay empty."""
        if not plaintext:
            return ""
        try:
            return self.cipher.encrypt(plaintext.encode("utf-8")).decode("utf-8")
        except EncryptionError:
            raise
        except Exception as e:
            raise EncryptionError(f"Failed to encrypt credential: {e}") from e

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a credential previously produced by :meth:`encrypt`."""
        if not ciphertext:
            return ""
        try:
            return self.cipher.decrypt(ciphertext.encode("utf-8")).decode("utf-8")
        except InvalidToken as e:
            raise EncryptionError(
                f"Failed to decrypt credential; was {self.key_path} replaced?"
            ) from e
        except EncryptionError:
            raise
        except Exception as e:
            raise EncryptionError(f"Failed to decrypt credential: {e}") from e
