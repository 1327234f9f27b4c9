"""
Schema migrations against a throwaway in-memory database.
"""
import pytest
from sqlalchemy import Column, MetaData, String, inspect, select, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401  registers tables on Base.metadata
from app.database import Base, create_db_engine
from app.migrations import MIGRATIONS, Migrator, schema_migrations


@pytest.fixture()
def fresh_engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    yield engine
    engine.dispose()


def test_creates_every_table(fresh_engine):
    applied = Migrator(fresh_engine).run()

    assert applied == len(MIGRATIONS)
    tables = set(inspect(fresh_engine).get_table_names())
    assert {
        "users",
        "cards",
        "folders",
        "receipts",
        "products",
        "receipt_items",
        "tags",
        "receipt_tags",
        "user_tokens",
        "schema_migrations",
    } <= tables


def test_records_each_step(fresh_engine):
    Migrator(fresh_engine).run()

    with fresh_engine.connect() as conn:
        rows = conn.execute(
            select(schema_migrations.c.id, schema_migrations.c.name).order_by(
                schema_migrations.c.id
            )
        ).all()
    assert [(row.id, row.name) for row in rows] == [
        (index, name) for index, (name, _) in enumerate(MIGRATIONS)
    ]


def test_runs_once_per_instance(fresh_engine):
    migrator = Migrator(fresh_engine)
    migrator.run()

    assert migrator.applied
    assert migrator.run() == 0


def test_second_instance_finds_nothing_pending(fresh_engine):
    Migrator(fresh_engine).run()
    assert Migrator(fresh_engine).run() == 0


def test_appended_step_applies_alone(fresh_engine):
    Migrator(fresh_engine).run()

    def add_notes_table(conn):
        conn.execute(text("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)"))

    extended = MIGRATIONS + [("create_notes", add_notes_table)]
    assert Migrator(fresh_engine, extended).run() == 1
    assert "notes" in inspect(fresh_engine).get_table_names()


def test_failed_step_is_not_recorded(fresh_engine):
    def broken(conn):
        conn.execute(text("CREATE TABLE broken (id INTEGER PRIMARY KEY"))

    migrator = Migrator(fresh_engine, MIGRATIONS + [("broken", broken)])
    with pytest.raises(OperationalError):
        migrator.run()

    assert not migrator.applied
    with fresh_engine.connect() as conn:
        last = conn.execute(
            select(schema_migrations.c.id).order_by(schema_migrations.c.id.desc())
        ).first()
    assert last.id == len(MIGRATIONS) - 1


def test_foreign_keys_enforced(fresh_engine):
    Migrator(fresh_engine).run()
    with fresh_engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


SHIPPED_COLUMNS = {
    "users": ["id", "username", "email", "password", "photo", "created_at", "updated_at"],
    "cards": ["id", "user_id", "name", "last4", "created_at", "updated_at"],
    "folders": ["id", "user_id", "name", "created_at", "updated_at"],
    "receipts": [
        "id",
        "user_id",
        "type",
        "store_name",
        "datetime",
        "image_url",
        "total_amount",
        "description",
        "card_id",
        "folder_id",
        "created_at",
        "updated_at",
    ],
    "products": ["id", "user_id", "name", "category", "last_price", "created_at", "updated_at"],
    "receipt_items": [
        "id",
        "receipt_id",
        "product_id",
        "quantity",
        "unit_price",
        "line_total",
        "created_at",
        "updated_at",
    ],
    "tags": ["id", "name", "user_id", "parent_id", "created_at", "updated_at"],
    "receipt_tags": ["receipt_id", "tag_id"],
    "user_tokens": ["id", "user_id", "hashed_token", "created_at", "updated_at"],
}


def test_shipped_steps_create_fixed_columns(fresh_engine):
    Migrator(fresh_engine).run()

    inspector = inspect(fresh_engine)
    for table, columns in SHIPPED_COLUMNS.items():
        assert [c["name"] for c in inspector.get_columns(table)] == columns, table


def test_model_change_does_not_alter_shipped_steps(fresh_engine, monkeypatch):
    changed = MetaData()
    for table in Base.metadata.sorted_tables:
        table.to_metadata(changed)
    changed.tables["cards"].append_column(Column("nickname", String(50)))
    monkeypatch.setattr(Base.metadata, "tables", changed.tables)

    Migrator(fresh_engine).run()

    columns = [c["name"] for c in inspect(fresh_engine).get_columns("cards")]
    assert "nickname" not in columns


def test_models_match_migrated_schema():
    for table, columns in SHIPPED_COLUMNS.items():
        model_columns = [c.name for c in Base.metadata.tables[table].columns]
        assert model_columns == columns, f"{table} model changed without a new migration"
