"""Explicit repositories over SQLAlchemy sessions.

``save`` is the only write path. It validates the record, refuses to store a
password that has not been through ``CredentialStore.prepare_for_persistence``
and commits before returning, so a written credential is durable once the
caller sees success.
"""

import logging
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from orgportal.core.errors import CredentialError, DuplicateEntry
from orgportal.models.validation import normalize_email

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class Repository(Generic[ModelT]):
    model: Type[ModelT]
    duplicate_message = "Email already registered"

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, record_id: str) -> Optional[ModelT]:
        if not record_id:
            return None
        return self.db.get(self.model, record_id)

    def find_by_email(self, email: str) -> Optional[ModelT]:
        return self.db.query(self.model).filter(self.model.email == normalize_email(email)).first()

    def list(self, skip: int = 0, limit: int = 100) -> List[ModelT]:
        return self.db.query(self.model).offset(skip).limit(limit).all()

    def validate(self, record: ModelT) -> None:
        pass

    def save(self, record: ModelT) -> ModelT:
        if hasattr(record, "email"):
            record.email = normalize_email(record.email)
        self.validate(record)
        if getattr(record, "has_pending_password", False):
            raise CredentialError(reason=f"refusing to persist unhashed password on {record!r}")
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("Rejected duplicate %s: %s", self.model.__name__, exc.orig)
            raise DuplicateEntry(self.duplicate_message) from exc
        self.db.refresh(record)
        return record
