from __future__ import annotations

import logging

from .contracts import AccountStore
from .errors import ConflictError

logger = logging.getLogger(__name__)


class UniquenessGuard:
    """Early rejection of emails already held by another account.

    The store's unique index on the lower-cased email remains the final
    authority; this check only avoids a doomed write.
    """

    def __init__(self, store: AccountStore) -> None:
        self._store = store

    def check_available(self, email: str, excluding_id: int | None = None) -> None:
        """Raise ``ConflictError`` when ``email`` belongs to an account other than ``excluding_id``."""
        existing = self._store.get_by_email(email)
        if existing is None or existing.account_id == excluding_id:
            return
        logger.warning("email already registered: %s", email)
        raise ConflictError(f"email already registered: {email}")
