"""
Schema migrations.

``MIGRATIONS`` is append-only: never edit or reorder a step that has
shipped, add a new one at the end. Each applied step is recorded in
``schema_migrations`` under its list index, so a database is brought up
to date by running every step past the highest recorded index.

Steps build their tables from the snapshot in ``_v1`` below, never from
the ORM models, so later model edits cannot change what a shipped step
creates. A schema change needs a new step.
"""
import logging
from typing import Callable, List, Tuple

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    insert,
    select,
    text,
)
from sqlalchemy.engine import Connection, Engine

from app.database import Base

logger = logging.getLogger(__name__)

# Key for the cross-process PostgreSQL advisory lock
MIGRATION_ADVISORY_LOCK_KEY = 13371337

schema_migrations = Table(
    "schema_migrations",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String(255), nullable=False),
    Column("applied_at", DateTime, server_default=func.now()),
)

Step = Callable[[Connection], None]


# ── Schema as of steps 0-8 (frozen) ──

_v1 = MetaData()


def _timestamps() -> List[Column]:
    return [
        Column("created_at", DateTime, server_default=func.now(), nullable=False),
        Column("updated_at", DateTime, server_default=func.now(), nullable=False),
    ]


def _owner() -> Column:
    return Column(
        "user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )


_users = Table(
    "users",
    _v1,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("photo", String(255)),
    *_timestamps(),
)

_cards = Table(
    "cards",
    _v1,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("name", String(255), nullable=False),
    Column("last4", String(4), nullable=False),
    *_timestamps(),
)

_folders = Table(
    "folders",
    _v1,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("name", String(255), nullable=False),
    *_timestamps(),
)

_receipts = Table(
    "receipts",
    _v1,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("type", String(50), nullable=False),
    Column("store_name", String(255)),
    Column("datetime", DateTime, nullable=False),
    Column("image_url", String(255)),
    Column("total_amount", Numeric(10, 2), nullable=False),
    Column("description", Text),
    Column("card_id", Integer, ForeignKey("cards.id", ondelete="SET NULL")),
    Column("folder_id", Integer, ForeignKey("folders.id", ondelete="SET NULL")),
    *_timestamps(),
)

_products = Table(
    "products",
    _v1,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("name", String(255), nullable=False),
    Column("category", String(50)),
    Column("last_price", Numeric(10, 2)),
    *_timestamps(),
    UniqueConstraint("user_id", "name", name="uq_products_user_name"),
)

_receipt_items = Table(
    "receipt_items",
    _v1,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "receipt_id",
        Integer,
        ForeignKey("receipts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("product_id", Integer, ForeignKey("products.id"), nullable=False, index=True),
    Column("quantity", Integer, nullable=False),
    Column("unit_price", Numeric(10, 2), nullable=False),
    Column("line_total", Numeric(10, 2), nullable=False),
    *_timestamps(),
    UniqueConstraint("receipt_id", "product_id", name="uq_receipt_items_receipt_product"),
)

_tags = Table(
    "tags",
    _v1,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(50), nullable=False),
    _owner(),
    Column("parent_id", Integer, ForeignKey("tags.id", ondelete="SET NULL")),
    *_timestamps(),
    UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
)

_receipt_tags = Table(
    "receipt_tags",
    _v1,
    Column(
        "receipt_id", Integer, ForeignKey("receipts.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

_user_tokens = Table(
    "user_tokens",
    _v1,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("hashed_token", String(255), nullable=False),
    *_timestamps(),
)


def _create_table(table: Table) -> Step:
    def step(conn: Connection) -> None:
        table.create(conn, checkfirst=True)

    return step


MIGRATIONS: List[Tuple[str, Step]] = [
    ("create_users", _create_table(_users)),
    ("create_cards", _create_table(_cards)),
    ("create_folders", _create_table(_folders)),
    ("create_receipts", _create_table(_receipts)),
    ("create_products", _create_table(_products)),
    ("create_receipt_items", _create_table(_receipt_items)),
    ("create_tags", _create_table(_tags)),
    ("create_receipt_tags", _create_table(_receipt_tags)),
    ("create_user_tokens", _create_table(_user_tokens)),
]


class Migrator:
    """Applies pending migrations once per instance.

    ``applied`` flips to True after the first successful run; later calls
    return immediately without touching the database.
    """

    def __init__(self, engine: Engine, migrations: List[Tuple[str, Step]] = MIGRATIONS):
        self.engine = engine
        self.migrations = migrations
        self.applied = False

    def _uses_advisory_lock(self) -> bool:
        return self.engine.dialect.name == "postgresql"

    def _lock(self, conn: Connection) -> None:
        if self._uses_advisory_lock():
            logger.info("Waiting for migration lock")
            conn.execute(
                text("SELECT pg_advisory_lock(:key)"), {"key": MIGRATION_ADVISORY_LOCK_KEY}
            )
            conn.commit()
        else:
            logger.debug("Dialect %s has no advisory locks", self.engine.dialect.name)

    def _unlock(self, conn: Connection) -> None:
        if self._uses_advisory_lock():
            conn.execute(
                text("SELECT pg_advisory_unlock(:key)"), {"key": MIGRATION_ADVISORY_LOCK_KEY}
            )
            conn.commit()

    def last_applied(self, conn: Connection) -> int:
        schema_migrations.create(conn, checkfirst=True)
        last = conn.execute(select(func.max(schema_migrations.c.id))).scalar()
        return -1 if last is None else last

    def run(self) -> int:
        """Apply pending steps. Returns how many were applied."""
        if self.applied:
            return 0

        applied = 0
        with self.engine.connect() as conn:
            self._lock(conn)
            try:
                start = self.last_applied(conn) + 1
                conn.commit()
                for index in range(start, len(self.migrations)):
                    name, step = self.migrations[index]
                    logger.info("Applying migration %d (%s)", index, name)
                    with conn.begin():
                        step(conn)
                        conn.execute(insert(schema_migrations).values(id=index, name=name))
                    applied += 1
            except Exception:
                logger.exception("A migration failed to apply")
                conn.rollback()
                raise
            finally:
                self._unlock(conn)

        self.applied = True
        logger.info("Schema up to date (%d migrations applied)", applied)
        return applied
