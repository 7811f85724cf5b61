from dotenv import load_dotenv
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

load_dotenv(".env")

from ledger.core.settings import settings
from ledger.services.import_analysis.analyzer import analyze_workbook
from ledger.services.import_analysis.preview import generate_import_preview


def main() -> None:
    if len(sys.argv) < 2:
        print("usage: import_smoke_test.py <workbook.xlsx|.csv>")
        sys.exit(2)

    path = Path(sys.argv[1])
    content = path.read_bytes()
    analysis = analyze_workbook(content, path.name)
    preview = generate_import_preview(analysis, content, row_limit=settings.import_preview_row_limit)
    print(preview.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    main()
