"""Tests for credential encryption."""

import stat
from pathlib import Path

import pytest

from tubecast.config.crypto import CredentialEncryptor
from tubecast.utils.errors import EncryptionError


class TestCredentialEncryptor:
    """Tests for CredentialEncryptor class."""

    def test_encrypt_decrypt_roundtrip(self, tmp_path: Path) -> None:
        encryptor = CredentialEncryptor(tmp_path / ".keyfile")

        ciphertext = encryptor.encrypt("my-secret-key")

        assert ciphertext != "my-secret-key"
        assert encryptor.decrypt(ciphertext) == "my-secret-key"

    def test_key_file_created_with_owner_only_permissions(self, tmp_path: Path) -> None:
        """Test that the key file is generated on first use and chmod 600."""
        key_path = tmp_path / ".keyfile"
        encryptor = CredentialEncryptor(key_path)
        assert not key_path.exists()

        encryptor.encrypt("value")

        assert key_path.exists()
        assert stat.S_IMODE(key_path.stat().st_mode) == 0o600

    def test_key_is_reused_across_instances(self, tmp_path: Path) -> None:
        key_path = tmp_path / ".keyfile"
        ciphertext = CredentialEncryptor(key_path).encrypt("persisted")

        assert CredentialEncryptor(key_path).decrypt(ciphertext) == "persisted"

    def test_empty_values_stay_empty(self, tmp_path: Path) -> None:
        encryptor = CredentialEncryptor(tmp_path / ".keyfile")

        assert encryptor.encrypt("") == ""
        assert encryptor.decrypt("") == ""
        assert not (tmp_path / ".keyfile").exists()

    def test_decrypt_with_other_key_fails(self, tmp_path: Path) -> None:
        """Test that a replaced key file surfaces as EncryptionError."""
        ciphertext = CredentialEncryptor(tmp_path / "a" / ".keyfile").encrypt("secret")
        other = CredentialEncryptor(tmp_path / "b" / ".keyfile")

        with pytest.raises(EncryptionError, match="decrypt"):
            other.decrypt(ciphertext)

    def test_insecure_key_permissions_rejected(self, tmp_path: Path) -> None:
        key_path = tmp_path / ".keyfile"
        CredentialEncryptor(key_path).encrypt("value")
        key_path.chmod(0o644)

        with pytest.raises(EncryptionError, match="insecure permissions"):
            CredentialEncryptor(key_path).encrypt("value")
