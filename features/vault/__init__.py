"""KeePass vault access."""

from .vault_service import VaultCredentials, VaultOpenError, VaultService, open_vault

__all__ = ["VaultCredentials", "VaultOpenError", "VaultService", "open_vault"]
