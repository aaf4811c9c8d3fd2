"""Tests for GitHub token encryption at rest."""

from __future__ import annotations

import pytest

from pagesync.exceptions import InternalServerError
from pagesync.services.crypto_service import decrypt_token, encrypt_token, mask_token


class TestTokenEncryption:
    def test_roundtrip(self) -> None:
        ciphertext = encrypt_token("ghp_abcdef", "app-secret")
        assert ciphertext != "ghp_abcdef"
        assert decrypt_token(ciphertext, "app-secret") == "ghp_abcdef"

    def test_random_iv(self) -> None:
        assert encrypt_token("same", "key") != encrypt_token("same", "key")

    def test_empty_token_stored_empty(self) -> None:
        assert encrypt_token("", "key") == ""
        assert decrypt_token("", "key") == ""

    def test_wrong_key_is_internal_error(self) -> None:
        ciphertext = encrypt_token("ghp_abcdef", "correct-key")
        with pytest.raises(InternalServerError, match="cannot be decrypted"):
            decrypt_token(ciphertext, "wrong-key")

    def test_garbage_is_internal_error(self) -> None:
        with pytest.raises(InternalServerError):
            decrypt_token("not-valid-ciphertext", "key")


class TestMaskToken:
    def test_long_token_shows_last_four(self) -> None:
        assert mask_token("ghp_1234567890abcd") == "...abcd"

    def test_short_token_fully_hidden(self) -> None:
        assert mask_token("12345678") == "..."

    def test_unset(self) -> None:
        assert mask_token("") is None
