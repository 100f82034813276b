"""Tests for kvrotator.vault.clients: per-run backend cache."""

from unittest.mock import MagicMock

from kvrotator.vault.clients import VaultClientCache


class TestVaultClientCache:
    def test_reuses_backend_per_vault(self):
        factory = MagicMock(side_effect=lambda name: MagicMock(name=name))
        cache = VaultClientCache(factory)

        first = cache.get("vault1")
        second = cache.get("vault1")

        assert first is second
        factory.assert_called_once_with("vault1")

    def test_case_insensitive(self):
        factory = MagicMock(side_effect=lambda name: MagicMock())
        cache = VaultClientCache(factory)

        assert cache.get("Vault1") is cache.get("VAULT1")
        factory.assert_called_once_with("vault1")

    def test_separate_vaults(self):
        cache = VaultClientCache(lambda name: MagicMock())
        assert cache.get("a") is not cache.get("b")
        assert len(cache) == 2

    def test_clear(self):
        factory = MagicMock(side_effect=lambda name: MagicMock())
        cache = VaultClientCache(factory)
        cache.get("a")
        cache.clear()
        cache.get("a")
        assert factory.call_count == 2
        assert len(cache) == 1
