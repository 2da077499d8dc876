"""Service layer for opening KeePass databases."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pykeepass import PyKeePass
from pykeepass.exceptions import (
    CredentialsError,
    HeaderChecksumError,
    PayloadChecksumError,
)
from pykeepass.group import Group

logger = logging.getLogger(__name__)


class VaultOpenError(Exception):
    """Raised when a vault cannot be read or decrypted."""

    def __init__(self, path: str, cause: str, which: Optional[str] = None) -> None:
        super().__init__(cause)
        self.path = path
        self.cause = cause
        self.which = which


@dataclass
class VaultCredentials:
    """Location and secrets needed to unlock one vault."""

    path: str
    password: str = field(default="", repr=False)
    keyfile: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """True when there is a path and at least one secret."""
        return bool(self.path) and bool(self.password or self.keyfile)


def open_vault(credentials: VaultCredentials) -> PyKeePass:
    """Open and decrypt a KeePass database.

    An empty password is passed as ``None`` so that key-file-only databases
    can be unlocked.

    Raises:
        VaultOpenError: the file is missing, unreadable, or cannot be
            decrypted with the given credentials.
    """
    path = credentials.path
    logger.info("Opening vault: %s", path)

    if not Path(path).is_file():
        logger.error("Vault file not found: %s", path)
        raise VaultOpenError(path, f"Failed to open file: No such file: {path}")

    try:
        vault = PyKeePass(
            path,
            password=credentials.password or None,
            keyfile=credentials.keyfile or None,
        )
    except CredentialsError:
        logger.error("Invalid credentials for: %s", path)
        raise VaultOpenError(
            path, "Failed to decrypt database: Invalid credentials"
        ) from None
    except (HeaderChecksumError, PayloadChecksumError) as e:
        logger.error("Corrupted vault %s: %s", path, type(e).__name__)
        raise VaultOpenError(
            path, f"Failed to decrypt database: {type(e).__name__}"
        ) from e
    except OSError as e:
        logger.exception("Failed to read vault: %s", path)
        raise VaultOpenError(path, f"Failed to open file: {e}") from e
    except Exception as e:
        logger.exception("Failed to decrypt vault: %s", path)
        raise VaultOpenError(path, f"Failed to decrypt database: {e}") from e

    logger.info("Vault opened successfully: %s", path)
    return vault


class VaultService:
    """Holds a single opened KeePass database."""

    def __init__(self) -> None:
        self._vault: Optional[PyKeePass] = None
        self._path: Optional[Path] = None

    @property
    def is_open(self) -> bool:
        return self._vault is not None

    @property
    def vault_path(self) -> Optional[Path]:
        return self._path

    @property
    def root_group(self) -> Optional[Group]:
        if self._vault:
            return self._vault.root_group
        return None

    def open(self, credentials: VaultCredentials) -> PyKeePass:
        """Open a vault, replacing any previously opened one."""
        self.close()
        self._vault = open_vault(credentials)
        self._path = Path(credentials.path)
        return self._vault

    def close(self) -> None:
        """Drop the reference to the decrypted tree."""
        if self._vault:
            logger.info("Closing vault: %s", self._path)
            self._vault = None
            self._path = None
