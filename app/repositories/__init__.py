"""
Repository functions, one module per table.

Every function takes the ``Session`` to run on as its first argument and
only flushes; committing belongs to the caller's ``transaction(db)``
scope. SQLAlchemy failures surface as ``StorageError``.
"""
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.errors import StorageError


def insert_ignoring_conflicts(db: Session, model):
    """INSERT ... ON CONFLICT DO NOTHING for the session's dialect."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model).on_conflict_do_nothing()
    if dialect == "sqlite":
        return sqlite.insert(model).on_conflict_do_nothing()
    raise StorageError(f"conflict-tolerant insert is not supported on {dialect}")
