import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

MIGRATION = Path(__file__).resolve().parents[1] / "app" / "db" / "migrations" / "versions" / "0001_initial.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("migration_0001_initial", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_initial_migration_matches_models():
    migration = _load_migration()
    engine = create_engine("sqlite://")

    with engine.begin() as connection:
        with Operations.context(MigrationContext.configure(connection)):
            migration.upgrade()
        inspector = inspect(connection)
        assert set(inspector.get_table_names()) == {"users", "uploads"}
        upload_columns = {column["name"] for column in inspector.get_columns("uploads")}
        assert {"owner_id", "title", "image_url", "public_id", "order"} <= upload_columns
        user_indexes = {index["name"]: index["unique"] for index in inspector.get_indexes("users")}
        assert user_indexes["ix_users_email"]
        assert user_indexes["ix_users_phone"]

        with Operations.context(MigrationContext.configure(connection)):
            migration.downgrade()
        assert inspect(connection).get_table_names() == []
