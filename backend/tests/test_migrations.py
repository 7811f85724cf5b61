import importlib.util
import unittest
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from ledger.core.database import Base
from ledger.services.ledger_store import ENTITY_MODELS


MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "0001_init.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("ledger_0001_init", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestInitMigration(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite://", poolclass=StaticPool)
        self.migration = _load_migration()

    def tearDown(self):
        self.engine.dispose()

    def _run(self, step):
        with self.engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                step()

    def test_upgrade_matches_models(self):
        self._run(self.migration.upgrade)
        inspector = inspect(self.engine)

        self.assertEqual(set(inspector.get_table_names()), {m.__tablename__ for m in ENTITY_MODELS.values()})
        for table in Base.metadata.sorted_tables:
            columns = {c["name"] for c in inspector.get_columns(table.name)}
            self.assertEqual(columns, {c.name for c in table.columns}, table.name)

        code_index = {i["name"]: i for i in inspector.get_indexes("companies")}["ix_companies_code"]
        self.assertTrue(code_index["unique"])

    def test_upgrade_skips_existing_schema(self):
        Base.metadata.create_all(bind=self.engine)
        self._run(self.migration.upgrade)
        self.assertIn("sales", inspect(self.engine).get_table_names())

    def test_downgrade_drops_tables(self):
        self._run(self.migration.upgrade)
        self._run(self.migration.downgrade)
        self.assertEqual(inspect(self.engine).get_table_names(), [])


if __name__ == "__main__":
    unittest.main()
