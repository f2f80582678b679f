"""Schema tests: users/authorities constraints in the ORM metadata and the alembic revision."""

import support

import importlib.util
import unittest
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.database import enable_sqlite_foreign_keys, make_engine
from app.models import Authority, Base

MIGRATION_PATH = (
    Path(__file__).resolve().parent.parent
    / "alembic"
    / "versions"
    / "20250301000000_create_users_and_authorities.py"
)


def _load_migration():
    spec = importlib.util.spec_from_file_location("create_users_and_authorities", MIGRATION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestOrmSchemaConstraints(unittest.TestCase):
    """The database itself rejects orphan and duplicate authority rows."""

    def setUp(self) -> None:
        self.SessionFactory = support.make_session_factory()
        self.db = self.SessionFactory()
        support.add_user(self.db, "user", "password")

    def tearDown(self) -> None:
        self.db.close()

    def test_orphan_authority_rejected(self) -> None:
        self.db.add(Authority(username="ghost", authority="ROLE_USER"))
        with self.assertRaises(IntegrityError):
            self.db.commit()
        self.db.rollback()
        self.assertEqual(self.db.query(Authority).filter(Authority.username == "ghost").count(), 0)

    def test_duplicate_authority_rejected(self) -> None:
        with self.assertRaises(IntegrityError):
            self.db.execute(
                text("insert into authorities (username, authority) values (:u, :a)"),
                {"u": "user", "a": "ROLE_USER"},
            )
        self.db.rollback()

    def test_second_distinct_authority_allowed(self) -> None:
        self.db.execute(
            text("insert into authorities (username, authority) values (:u, :a)"),
            {"u": "user", "a": "ROLE_ADMIN"},
        )
        self.db.commit()
        self.assertEqual(self.db.query(Authority).filter(Authority.username == "user").count(), 2)


class TestSqliteEngineForeignKeys(unittest.TestCase):
    """Engines built from a sqlite:// DATABASE_URL enforce REFERENCES clauses."""

    def test_orphan_insert_rejected(self) -> None:
        engine = make_engine(Settings(_env_file=None, DATABASE_URL="sqlite://"))
        Base.metadata.create_all(engine)
        with engine.connect() as conn:
            self.assertEqual(conn.execute(text("PRAGMA foreign_keys")).scalar(), 1)
            with self.assertRaises(IntegrityError):
                conn.execute(text("insert into authorities values ('ghost', 'ROLE_USER')"))


class TestMigration(unittest.TestCase):
    """Running the revision produces the two tables, the foreign key and the unique index."""

    def setUp(self) -> None:
        self.engine = enable_sqlite_foreign_keys(
            create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        )
        self.migration = _load_migration()
        with self.engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                self.migration.upgrade()

    def test_tables_and_columns(self) -> None:
        inspector = inspect(self.engine)
        self.assertEqual(
            [c["name"] for c in inspector.get_columns("users")],
            ["username", "password", "enabled"],
        )
        self.assertEqual(
            [c["name"] for c in inspector.get_columns("authorities")],
            ["username", "authority"],
        )
        self.assertEqual(inspector.get_pk_constraint("users")["constrained_columns"], ["username"])

    def test_unique_index_on_username_and_authority(self) -> None:
        indexes = {ix["name"]: ix for ix in inspect(self.engine).get_indexes("authorities")}
        self.assertIn("ix_auth_username", indexes)
        self.assertTrue(indexes["ix_auth_username"]["unique"])
        self.assertEqual(indexes["ix_auth_username"]["column_names"], ["username", "authority"])

    def test_foreign_key_to_users(self) -> None:
        fks = inspect(self.engine).get_foreign_keys("authorities")
        self.assertEqual(len(fks), 1)
        self.assertEqual(fks[0]["referred_table"], "users")
        self.assertEqual(fks[0]["constrained_columns"], ["username"])

    def test_migrated_schema_enforces_invariants(self) -> None:
        insert_user = text("insert into users (username, password, enabled) values ('user', 'x', 1)")
        insert_authority = text("insert into authorities (username, authority) values (:u, 'ROLE_USER')")
        with self.engine.begin() as conn:
            conn.execute(insert_user)
            conn.execute(insert_authority, {"u": "user"})
        with self.assertRaises(IntegrityError):
            with self.engine.begin() as conn:
                conn.execute(insert_authority, {"u": "user"})
        with self.assertRaises(IntegrityError):
            with self.engine.begin() as conn:
                conn.execute(insert_authority, {"u": "ghost"})

    def test_downgrade_drops_tables(self) -> None:
        with self.engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                self.migration.downgrade()
        self.assertEqual(inspect(self.engine).get_table_names(), [])


if __name__ == "__main__":
    unittest.main()
