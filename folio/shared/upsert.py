"""
Single-statement upserts for key/value style tables

Writes a row keyed by a unique column with one
INSERT ... ON CONFLICT (<column>) DO UPDATE, so two writers racing on
the same key never hit a duplicate-key error. The conflict clause is
built with the PostgreSQL or SQLite insert() depending on which engine
the session is bound to.

    atomic_upsert(db, SiteStats, "key", "total_articles", {"value": "12"})
    db.commit()
"""

from typing import Any, Callable, Dict, Type

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from folio.shared.database import Base

DIALECT_INSERTS: Dict[str, Callable] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _insert_for(db: Session) -> Callable:
    dialect = db.get_bind().dialect.name
    try:
        return DIALECT_INSERTS[dialect]
    except KeyError:
        raise ValueError(f"Atomic upsert is not supported for dialect '{dialect}'")


def atomic_upsert(
    db: Session,
    model: Type[Base],
    unique_field: str,
    unique_value: Any,
    update_data: Dict[str, Any],
    auto_update_timestamp: bool = True,
    timestamp_field: str = 'updated_at'
) -> None:
    """
    Insert a row, or overwrite update_data on the row that already holds
    unique_value. The caller commits.

    Args:
        db: Session to execute on
        model: Mapped class whose unique_field carries a unique index
        unique_field: Conflict target column (e.g. 'key')
        unique_value: Value identifying the row (e.g. 'total_articles')
        update_data: Columns to write on insert and on conflict
        auto_update_timestamp: Also set timestamp_field to NOW() on conflict
        timestamp_field: Column stamped when auto_update_timestamp is on

    Raises:
        ValueError: Unknown unique or timestamp field, or an engine
            without ON CONFLICT support
    """
    for field in (unique_field, *update_data):
        if not hasattr(model, field):
            raise ValueError(f"Model {model.__name__} does not have field '{field}'")
    if auto_update_timestamp and not hasattr(model, timestamp_field):
        raise ValueError(f"Model {model.__name__} does not have field '{timestamp_field}'")

    stmt = _insert_for(db)(model).values({unique_field: unique_value, **update_data})

    # excluded.<col> is the row the INSERT would have written
    overwrite = {field: stmt.excluded[field] for field in update_data}
    if auto_update_timestamp:
        overwrite[timestamp_field] = func.now()

    db.execute(stmt.on_conflict_do_update(index_elements=[unique_field], set_=overwrite))
