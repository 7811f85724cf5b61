import io
import unittest
import zipfile

from ledger.schemas.imports import SheetAnalysis
from ledger.services.import_analysis.analyzer import (
    LOW_CONFIDENCE_WARNING,
    NO_SHEETS_WARNING,
    UNKNOWN_PATTERN_WARNING,
    aggregate_sheets,
    analyze_workbook,
)
from ledger.services.import_analysis.errors import WorkbookParseError
from xlsx_fixtures import SALES_HEADERS, SALES_ROW, make_xlsx


def _sheet(name: str, pattern: str, confidence: float) -> SheetAnalysis:
    return SheetAnalysis(
        name=name,
        row_count=1,
        column_count=1,
        columns=["x"],
        detected_pattern=pattern,
        confidence=confidence,
    )


class TestAggregateSheets(unittest.TestCase):
    def test_no_sheets(self):
        self.assertEqual(aggregate_sheets([]), ("unknown", 0.0))

    def test_single_sheet_is_copied(self):
        self.assertEqual(aggregate_sheets([_sheet("a", "unknown", 0.2)]), ("unknown", 0.2))
        self.assertEqual(aggregate_sheets([_sheet("a", "hotels", 0.65)]), ("hotels", 0.65))

    def test_same_pattern_averages_confidence(self):
        pattern, confidence = aggregate_sheets([_sheet("a", "sales", 0.9), _sheet("b", "sales", 0.7)])
        self.assertEqual(pattern, "sales")
        self.assertAlmostEqual(confidence, 0.8)

    def test_unknown_sheets_pull_the_average_down(self):
        pattern, confidence = aggregate_sheets([_sheet("a", "sales", 0.9), _sheet("b", "unknown", 0.1)])
        self.assertEqual(pattern, "sales")
        self.assertAlmostEqual(confidence, 0.5)

    def test_different_patterns_are_mixed(self):
        pattern, confidence = aggregate_sheets([_sheet("a", "sales", 1.0), _sheet("b", "purchases", 0.8)])
        self.assertEqual(pattern, "mixed")
        self.assertAlmostEqual(confidence, 0.9)

    def test_all_unknown_is_zero(self):
        self.assertEqual(
            aggregate_sheets([_sheet("a", "unknown", 0.2), _sheet("b", "unknown", 0.1)]),
            ("unknown", 0.0),
        )


class TestAnalyzeWorkbook(unittest.TestCase):
    def test_single_sales_sheet(self):
        content = make_xlsx({"Sales": [SALES_HEADERS, SALES_ROW]})
        analysis = analyze_workbook(content, "sales.xlsx")

        self.assertEqual(analysis.file_name, "sales.xlsx")
        self.assertEqual(analysis.file_size, len(content))
        self.assertEqual(analysis.overall_pattern, "sales")
        self.assertEqual(analysis.confidence, 1.0)
        self.assertEqual(analysis.warnings, [])

        sheet = analysis.sheets[0]
        self.assertEqual(sheet.name, "Sales")
        self.assertEqual(sheet.row_count, 1)
        self.assertEqual(sheet.column_count, 5)
        self.assertEqual(sheet.columns, SALES_HEADERS)
        self.assertEqual(sheet.sample_rows[0]["Hotel Name"], "Grand Plaza Hotel")
        self.assertEqual(sheet.sample_rows[0]["Quantity"], 5.5)

    def test_sample_rows_are_capped(self):
        rows = [SALES_HEADERS] + [["Hotel %d" % i, "2024-11-15", 1, 2, 2] for i in range(12)]
        analysis = analyze_workbook(make_xlsx({"Sales": rows}), "sales.xlsx")
        self.assertEqual(analysis.sheets[0].row_count, 12)
        self.assertEqual(len(analysis.sheets[0].sample_rows), 5)

    def test_empty_only_sheet(self):
        analysis = analyze_workbook(make_xlsx({"Blank": []}), "blank.xlsx")
        self.assertEqual(analysis.sheets, [])
        self.assertEqual(analysis.overall_pattern, "unknown")
        self.assertEqual(analysis.confidence, 0.0)
        self.assertIn('Sheet "Blank" is empty', analysis.warnings)
        self.assertIn(NO_SHEETS_WARNING, analysis.warnings)
        self.assertIn(UNKNOWN_PATTERN_WARNING, analysis.warnings)

    def test_header_only_sheet_counts_as_empty(self):
        content = make_xlsx({"Sales": [SALES_HEADERS, SALES_ROW], "Headers": [SALES_HEADERS]})
        analysis = analyze_workbook(content, "book.xlsx")
        self.assertEqual([s.name for s in analysis.sheets], ["Sales"])
        self.assertIn('Sheet "Headers" is empty', analysis.warnings)
        self.assertEqual(analysis.overall_pattern, "sales")

    def test_sales_and_purchases_are_mixed(self):
        content = make_xlsx(
            {
                "Sales": [SALES_HEADERS, SALES_ROW],
                "Purchases": [
                    ["Supplier Name", "Date", "Quantity", "Rate Per Kg", "Total Amount"],
                    ["Forest Charcoal Co", "2024-11-10", 10, 3, 30],
                ],
            }
        )
        analysis = analyze_workbook(content, "book.xlsx")
        self.assertEqual([s.detected_pattern for s in analysis.sheets], ["sales", "purchases"])
        self.assertEqual(analysis.overall_pattern, "mixed")
        self.assertAlmostEqual(analysis.confidence, 1.0)

    def test_unknown_sheet_warnings_co_occur(self):
        analysis = analyze_workbook(make_xlsx({"Misc": [["Foo", "Bar"], [1, 2]]}), "misc.xlsx")
        self.assertEqual(analysis.sheets[0].detected_pattern, "unknown")
        self.assertEqual(analysis.sheets[0].mapping, {})
        self.assertEqual(
            analysis.warnings,
            [LOW_CONFIDENCE_WARNING, UNKNOWN_PATTERN_WARNING],
        )

    def test_csv_upload_is_one_sheet(self):
        content = b"Hotel Name,Date,Quantity,Rate Per Kg,Total Amount\nGrand Plaza Hotel,2024-11-15,5.5,4,22\n"
        analysis = analyze_workbook(content, "november.csv")
        self.assertEqual([s.name for s in analysis.sheets], ["november"])
        self.assertEqual(analysis.overall_pattern, "sales")

    def test_corrupt_workbook_fails(self):
        with self.assertRaises(WorkbookParseError):
            analyze_workbook(b"definitely not a zip archive", "broken.xlsx")

    def test_corrupt_sheet_xml_fails(self):
        original = make_xlsx({"Sales": [SALES_HEADERS, SALES_ROW]})
        buf = io.BytesIO()
        with zipfile.ZipFile(io.BytesIO(original)) as src, zipfile.ZipFile(buf, "w") as dst:
            for item in src.infolist():
                data = src.read(item.filename)
                if item.filename == "xl/worksheets/sheet1.xml":
                    data = b"<worksheet><sheetData><row><c r='A1' t='s'><v>oops"
                dst.writestr(item, data)

        with self.assertRaises(WorkbookParseError):
            analyze_workbook(buf.getvalue(), "truncated.xlsx")

    def test_unsupported_extension_fails(self):
        with self.assertRaises(WorkbookParseError):
            analyze_workbook(b"hello", "notes.txt")


if __name__ == "__main__":
    unittest.main()
