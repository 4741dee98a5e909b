from __future__ import annotations

from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

ModelT = TypeVar("ModelT")


def lock_reservation_target(db: Session, model: type[ModelT], row_id: str) -> ModelT | None:
    """Load a reservable row (classroom, faculty, resource) with a row-level write lock.

    Held until the surrounding transaction commits, so concurrent conflict
    checks against the same target run one after another on databases that
    support ``SELECT ... FOR UPDATE``. SQLite ignores the clause.
    """
    statement = select(model).where(model.id == row_id).with_for_update()
    return db.execute(statement).scalar_one_or_none()
