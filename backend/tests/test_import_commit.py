import unittest

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ledger.core.database import Base
from ledger.models.company import Company
from ledger.models.hotel import Hotel
from ledger.models.payment import Payment
from ledger.models.purchase import Purchase
from ledger.models.sale import Sale
from ledger.models.supplier import Supplier
from ledger.services.import_analysis.analyzer import analyze_workbook
from ledger.services.import_commit import commit_import, generate_entity_code
from ledger.services.ledger_store import LedgerStore, UnknownEntityTypeError
from xlsx_fixtures import make_xlsx


SALES_WITH_STATUS = ["Hotel Name", "Date", "Quantity", "Rate Per Kg", "Total Amount", "Payment Status"]


class _DbTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)
        self.db = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)()
        self.store = LedgerStore(self.db)

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()

    def _commit(self, sheets, file_name="book.xlsx", company_id=None):
        content = make_xlsx(sheets)
        analysis = analyze_workbook(content, file_name)
        return commit_import(self.store, analysis, content, company_id=company_id)


class TestLedgerStore(_DbTestCase):
    def test_create_and_find(self):
        self.store.create("companies", {"name": "Acme", "code": "AC1"})
        self.store.commit()
        self.assertEqual(self.store.find_by_natural_key("companies", "AC1").name, "Acme")
        self.assertIsNone(self.store.find_by_natural_key("companies", "ZZ9"))

    def test_unknown_entity_type(self):
        with self.assertRaises(UnknownEntityTypeError):
            self.store.create("widgets", {})

    def test_generated_codes_are_unique(self):
        self.assertEqual(generate_entity_code(self.store, "hotels", "Grand Plaza Hotel"), "GRANDP001")
        self.store.create("hotels", {"name": "Grand Plaza Hotel", "code": "GRANDP001"})
        self.assertEqual(generate_entity_code(self.store, "hotels", "Grand Plaza Hotel"), "GRANDP002")


class TestCommitSales(_DbTestCase):
    def test_sales_rows_create_hotels_sales_and_payments(self):
        result = self._commit(
            {
                "Sales": [
                    SALES_WITH_STATUS,
                    ["Grand Plaza Hotel", "2024-11-15", 5.5, 4.0, 22, "Paid"],
                    ["Grand Plaza Hotel", "2024-11-16", 2, 4, 8, "Pending"],
                    ["Sea View Resort", "2024-11-17", 0, 4, 0],
                ]
            }
        )

        self.assertEqual(result.success, 2)
        self.assertEqual(result.new_hotels, 1)
        self.assertEqual(result.new_sales, 2)
        self.assertEqual(result.new_payments, 1)
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].sheet, "Sales")
        self.assertEqual(result.errors[0].row, 3)
        self.assertEqual(result.errors[0].error, "Valid quantity is required; Valid total amount is required")

        self.assertEqual(self.db.query(Hotel).count(), 1)
        self.assertEqual(self.db.query(Sale).count(), 2)
        payment = self.db.query(Payment).one()
        self.assertEqual(float(payment.amount), 22.0)
        self.assertEqual(payment.notes, "Imported from Excel - Full payment")

    def test_unparseable_sale_date_is_a_row_error(self):
        result = self._commit(
            {"Sales": [SALES_WITH_STATUS, ["Grand Plaza Hotel", "next tuesday", 1, 1, 1]]}
        )
        self.assertEqual(result.success, 0)
        self.assertEqual(result.errors[0].error, "Invalid date format")
        # nothing is left behind for the failed row
        self.assertEqual(self.db.query(Hotel).count(), 0)

    def test_company_id_is_attached(self):
        company = self.store.create("companies", {"name": "Acme", "code": "AC1"})
        self.store.commit()
        self._commit({"Sales": [SALES_WITH_STATUS, ["Grand Plaza Hotel", "2024-11-15", 1, 1, 1]]}, company_id=company.id)
        self.assertEqual(self.db.query(Sale).one().company_id, company.id)


class TestCommitDirectories(_DbTestCase):
    def test_companies_reject_duplicate_codes(self):
        result = self._commit(
            {
                "Companies": [
                    ["Company Name", "Code", "Phone"],
                    ["Acme Charcoal", "AC1", "555-0100"],
                    ["Beta Fuels", "AC1", "555-0101"],
                ]
            }
        )
        self.assertEqual(result.new_companies, 1)
        self.assertEqual(result.errors[0].row, 2)
        self.assertEqual(result.errors[0].error, "Company code already exists")
        company = self.db.query(Company).one()
        self.assertEqual(company.phone, "555-0100")

    def test_purchases_create_missing_suppliers(self):
        result = self._commit(
            {
                "Purchases": [
                    ["Supplier Name", "Date", "Quantity", "Rate Per Kg", "Total Amount", "Invoice Number"],
                    ["Forest Charcoal Co", "2024-11-10", 10, 3, 30, "INV-1"],
                    ["Forest Charcoal Co", "2024-11-12", 5, 3, 15, "INV-2"],
                ]
            }
        )
        self.assertEqual(result.new_purchases, 2)
        self.assertEqual(result.new_suppliers, 1)
        self.assertEqual(self.db.query(Supplier).one().name, "Forest Charcoal Co")

    def test_unparseable_purchase_date_is_a_row_error(self):
        result = self._commit(
            {
                "Purchases": [
                    ["Supplier Name", "Date", "Quantity", "Rate Per Kg", "Total Amount"],
                    ["Forest Charcoal Co", "next tuesday", 10, 3, 30],
                ]
            }
        )
        self.assertEqual(result.success, 0)
        self.assertEqual(result.errors[0].error, "Invalid date format")
        self.assertEqual(self.db.query(Purchase).count(), 0)
        self.assertEqual(self.db.query(Supplier).count(), 0)

    def test_unknown_sheets_are_skipped(self):
        result = self._commit({"Misc": [["Foo", "Bar"], [1, 2]]})
        self.assertEqual(result.skipped_sheets, ["Misc"])
        self.assertEqual(result.success, 0)
        self.assertEqual(result.errors, [])


if __name__ == "__main__":
    unittest.main()
