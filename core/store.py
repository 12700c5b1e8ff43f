# core/store.py
"""
Record store used by every handler.

A ``RecordStore`` wraps one SQLModel session and is handed to handlers
through the ``get_store`` dependency. Outside of ``atomic()`` every mutation
commits on its own; inside it, mutations are flushed and commit (or roll
back) together when the block exits.
"""
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar
import logging

from fastapi import Depends
from sqlalchemy import delete as sql_delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, select

from core.database import get_session
from core.errors import ConflictError
from models.models import EmailClaim

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=SQLModel)


class RecordStore:
    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    # ------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------
    @contextmanager
    def atomic(self) -> Iterator["RecordStore"]:
        """Group mutations so they persist together or not at all."""
        if self._depth:
            yield self
            return

        self._depth += 1
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._depth -= 1

    def _persist(self) -> None:
        if self._depth:
            self.session.flush()
            return
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    # ------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------
    def get(self, kind: Type[RecordT], record_id: Any) -> Optional[RecordT]:
        if record_id is None:
            return None
        return self.session.get(kind, record_id)

    def list(self, kind: Type[RecordT], *conditions, order_by=None) -> List[RecordT]:
        statement = select(kind)
        if conditions:
            statement = statement.where(*conditions)
        if order_by is not None:
            statement = statement.order_by(order_by)
        return list(self.session.exec(statement).all())

    def first(self, kind: Type[RecordT], *conditions) -> Optional[RecordT]:
        return self.session.exec(select(kind).where(*conditions)).first()

    def count(self, kind: Type[RecordT], *conditions) -> int:
        statement = select(func.count()).select_from(kind)
        if conditions:
            statement = statement.where(*conditions)
        return int(self.session.exec(statement).one())

    def create(self, kind: Type[RecordT], record: RecordT) -> RecordT:
        if not isinstance(record, kind):
            raise TypeError(f"Expected {kind.__name__}, got {type(record).__name__}")
        self.session.add(record)
        try:
            self._persist()
        except IntegrityError as e:
            logger.warning("Integrity error creating %s: %s", kind.__name__, e.orig)
            raise ConflictError(f"{kind.__name__} violates a uniqueness constraint") from e
        self.session.refresh(record)
        return record

    def update(self, kind: Type[RecordT], record_id: Any, fields: Dict[str, Any]) -> Optional[RecordT]:
        record = self.get(kind, record_id)
        if record is None:
            return None

        for name in fields:
            if name not in kind.model_fields:
                raise ValueError(f"{kind.__name__} has no field '{name}'")
        for name, value in fields.items():
            setattr(record, name, value)

        self.session.add(record)
        try:
            self._persist()
        except IntegrityError as e:
            raise ConflictError(f"{kind.__name__} violates a uniqueness constraint") from e
        self.session.refresh(record)
        return record

    def delete(self, kind: Type[RecordT], record_id: Any) -> bool:
        record = self.get(kind, record_id)
        if record is None:
            return False
        self.session.delete(record)
        self._persist()
        return True

    def delete_where(self, kind: Type[RecordT], *conditions) -> int:
        """Bulk delete matching rows; returns how many went."""
        result = self.session.connection().execute(sql_delete(kind).where(*conditions))
        self._persist()
        return result.rowcount or 0

    # ------------------------------------------------------------
    # Email uniqueness across accounts and staff
    # ------------------------------------------------------------
    def email_in_use(self, email: str) -> bool:
        return self.get(EmailClaim, email.strip().lower()) is not None

    def claim_email(self, email: str, owner: str) -> EmailClaim:
        """Insert-if-absent on the claim table; a taken address raises ConflictError."""
        normalized = email.strip().lower()
        if self.get(EmailClaim, normalized) is not None:
            raise ConflictError("Email already exists")
        try:
            return self.create(EmailClaim, EmailClaim(email=normalized, owner=owner))
        except ConflictError:
            raise ConflictError("Email already exists")

    def release_email(self, email: str) -> bool:
        return self.delete(EmailClaim, email.strip().lower())


# ============================================================
# ✅ Dependency: FastAPI store provider
# ============================================================
def get_store(session: Session = Depends(get_session)) -> RecordStore:
    return RecordStore(session)
