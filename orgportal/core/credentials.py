"""Credential Store: bcrypt hashing and verification of principal passwords.

Records never hold a plaintext password in a mapped column. A new password is
parked with ``record.set_password`` and only becomes persistable once
``prepare_for_persistence`` has replaced it with a hash; repositories refuse
to save a record that still has one pending.

bcrypt is deliberately slow. Callers run it from synchronous FastAPI routes,
which execute in the thread pool rather than on the event loop.
"""

import logging

import bcrypt

from orgportal.core.errors import CredentialError, NotFound, ValidationError

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class CredentialStore:
    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash = None

    def hash(self, plaintext: str) -> str:
        encoded = _encode(plaintext)
        try:
            hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds))
        except Exception as exc:
            logger.exception("Password hashing failed")
            raise CredentialError(reason="bcrypt.hashpw failed") from exc
        return hashed.decode("ascii")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """True only if ``plaintext`` matches ``hashed``. Never raises on mismatch."""
        if not plaintext or not hashed:
            return False
        encoded = plaintext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, hashed.encode("ascii"))
        except (ValueError, UnicodeEncodeError):
            logger.warning("Stored password hash is malformed")
            return False

    def dummy_verify(self, plaintext: str) -> bool:
        """Spend one verification's worth of time; used when no principal matched."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("dummy-password-for-timing")
        self.verify(plaintext, self._dummy_hash)
        return False

    def prepare_for_persistence(self, record):
        """Hash the record's pending password, if it has one."""
        pending = record.take_pending_password()
        if pending is not None:
            record.hashed_password = self.hash(pending)
        return record

    def rotate(self, repository, principal_id: str, new_plaintext: str):
        record = repository.find_by_id(principal_id)
        if record is None:
            raise NotFound("User not found")
        record.set_password(new_plaintext)
        self.prepare_for_persistence(record)
        repository.save(record)
        logger.info("Rotated password for %s", principal_id)
        return record


def _encode(plaintext: str) -> bytes:
    if not plaintext:
        raise ValidationError("Password must not be empty")
    encoded = plaintext.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return encoded
