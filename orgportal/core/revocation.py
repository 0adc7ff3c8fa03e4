"""Server-side token revocation.

Each principal has a generation counter. Tokens carry the generation that was
current when they were issued; revoking bumps the counter so every older
token stops validating while freshly issued ones keep working.
"""

import logging
import threading
from abc import ABC, abstractmethod

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from orgportal.models.token_generation import TokenGeneration

logger = logging.getLogger(__name__)


class RevocationStore(ABC):
    """Abstract interface for per-principal token generations."""

    @abstractmethod
    def current_generation(self, key: str) -> int:
        pass

    @abstractmethod
    def revoke(self, key: str) -> int:
        """Atomically bump the generation for ``key`` and return the new value."""
        pass

    def is_current(self, key: str, generation: int) -> bool:
        return generation == self.current_generation(key)


class InMemoryRevocationStore(RevocationStore):
    """In-memory storage (single process only)."""

    def __init__(self):
        self._generations: dict[str, int] = {}
        self._lock = threading.Lock()

    def current_generation(self, key: str) -> int:
        with self._lock:
            return self._generations.get(key, 0)

    def revoke(self, key: str) -> int:
        with self._lock:
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
            return generation


class DatabaseRevocationStore(RevocationStore):
    """Generations kept in the ``token_generations`` table, shared by all workers."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def current_generation(self, key: str) -> int:
        with self._session_factory() as db:
            row = db.get(TokenGeneration, key)
            return row.generation if row else 0

    def revoke(self, key: str) -> int:
        with self._session_factory() as db:
            if not self._bump(db, key):
                db.add(TokenGeneration(key=key, generation=1))
                try:
                    db.commit()
                except IntegrityError:
                    # Another worker inserted the row first
                    db.rollback()
                    self._bump(db, key)
                    db.commit()
            else:
                db.commit()
            return db.get(TokenGeneration, key, populate_existing=True).generation

    @staticmethod
    def _bump(db, key: str) -> bool:
        result = db.execute(
            update(TokenGeneration)
            .where(TokenGeneration.key == key)
            .values(generation=TokenGeneration.generation + 1)
        )
        return result.rowcount > 0


def create_revocation_store(backend: str, session_factory=None) -> RevocationStore:
    if backend == "memory":
        logger.warning("Using in-memory token revocation; revocations are lost on restart")
        return InMemoryRevocationStore()
    return DatabaseRevocationStore(session_factory)
