"""
Adapter: In-memory credential store.

Implements CredentialVerifier port.
Holds the fixed API login accounts from settings. Passwords are hashed
once at construction and never kept in plain text.
"""

import logging
from typing import Mapping

from app.domain.management.passwords import (
    ITERATIONS,
    hash_password,
    verify_password,
)
from app.domain.management.ports import CredentialVerifier

logger = logging.getLogger(__name__)


class InMemoryCredentialVerifier(CredentialVerifier):
    """Verifies Basic credentials against a fixed username/password map."""

    def __init__(
        self, accounts: Mapping[str, str], iterations: int = ITERATIONS
    ) -> None:
        self._hashes = {
            username: hash_password(password, iterations)
            for username, password in accounts.items()
        }
        logger.info("Loaded %d API accounts", len(self._hashes))

    def verify(self, username: str, password: str) -> bool:
        stored = self._hashes.get(username)
        if stored is None:
            return False
        return verify_password(password, stored)
