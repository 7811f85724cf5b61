import io
from typing import Any

import openpyxl


SALES_HEADERS = ["Hotel Name", "Date", "Quantity", "Rate Per Kg", "Total Amount"]
SALES_ROW = ["Grand Plaza Hotel", "2024-11-15", 5.5, 4.0, 22]


def make_xlsx(sheets: dict[str, list[list[Any]]]) -> bytes:
    """Build an in-memory workbook; sheet order follows the dict."""

    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title=title)
        for row in rows:
            ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    wb.close()
    return buf.getvalue()
