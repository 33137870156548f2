"""Push identity lookup.

Maps board user ids to their personal channel identity (LINE user id).
Profiles are owned by the board's business schema; this module only reads
them.
"""

import threading
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from infrastructure.persistence.models import ProfileRecord


class IdentityDirectory(Protocol):
    """Read access to push identities."""

    def get_identity(self, user_id: str) -> Optional[str]:
        """Return the user's push identity, or None when not linked."""
        ...


class InMemoryIdentityDirectory:
    """Dict-backed directory for development and tests."""

    def __init__(self, identities: Optional[Dict[str, Optional[str]]] = None) -> None:
        self._identities: Dict[str, Optional[str]] = dict(identities or {})
        self._lock = threading.Lock()

    def get_identity(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._identities.get(user_id) or None

    def set_identity(self, user_id: str, identity: Optional[str]) -> None:
        with self._lock:
            self._identities[user_id] = identity

    def get_identities(self, user_ids: Iterable[str]) -> Dict[str, Optional[str]]:
        with self._lock:
            return {uid: self._identities.get(uid) or None for uid in user_ids}


class SqlIdentityDirectory:
    """Reads ``profiles.line_user_id``."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get_identity(self, user_id: str) -> Optional[str]:
        with self._session_factory() as session:
            identity = session.scalar(
                select(ProfileRecord.line_user_id).where(ProfileRecord.id == user_id)
            )
        return identity or None
