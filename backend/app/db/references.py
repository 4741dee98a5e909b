from __future__ import annotations

from collections.abc import Iterable

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session


def referencing_tables(db: Session, row_id: str, columns: Iterable[InstrumentedAttribute]) -> list[str]:
    """Names of the tables holding at least one row that points at ``row_id``."""
    tables: set[str] = set()
    for column in columns:
        hit = db.execute(select(column).where(column == row_id).limit(1)).first()
        if hit is not None:
            tables.add(column.class_.__tablename__)
    return sorted(tables)


def delete_unreferenced(db: Session, row, label: str, columns: Iterable[InstrumentedAttribute]) -> None:
    tables = referencing_tables(db, row.id, columns)
    if tables:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{label} is still referenced by {', '.join(tables)}",
        )
    db.delete(row)


def commit_delete(db: Session, label: str) -> None:
    # Databases that enforce foreign keys still catch references added concurrently.
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{label} is still referenced") from exc
