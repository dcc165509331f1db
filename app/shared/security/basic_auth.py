"""
HTTP Basic authentication dependency.

Every management route depends on require_credentials. The credential
check itself is delegated to the CredentialVerifier port so the account
store can be swapped without touching the routers.
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.core.config import settings
from app.domain.management.ports import CredentialVerifier
from app.infrastructure.management.credentials import InMemoryCredentialVerifier

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"

basic_scheme = HTTPBasic(auto_error=False)


@lru_cache
def get_credential_verifier() -> CredentialVerifier:
    """Build the credential verifier once from the configured accounts."""
    return InMemoryCredentialVerifier(
        settings.auth_users, iterations=settings.password_hash_iterations
    )


def require_credentials(
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_scheme),
    verifier: CredentialVerifier = Depends(get_credential_verifier),
) -> str:
    """Return the authenticated username.

    Raises:
        HTTPException: 401 when credentials are missing or wrong.
    """
    if not settings.auth_enabled:
        return ANONYMOUS
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Basic"},
        )
    if not verifier.verify(credentials.username, credentials.password):
        logger.warning("Rejected credentials for user=%s", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
