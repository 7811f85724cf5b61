from ledger.services.import_analysis.analyzer import analyze_workbook
from ledger.services.import_analysis.preview import generate_import_preview


def main() -> None:
    content = (
        "Hotel Name,Date,Quantity,Rate Per Kg,Total Amount\n"
        "Grand Plaza Hotel,2024-11-15,5.5,4,22\n"
        "Sea View Resort,2024-11-16,0,4,0\n"
    ).encode("utf-8")

    analysis = analyze_workbook(content, "november.csv")
    assert analysis.overall_pattern == "sales", analysis.overall_pattern
    assert analysis.sheets[0].name == "november"
    assert analysis.sheets[0].row_count == 2

    preview = generate_import_preview(analysis, content)
    mapped = preview.mapped_data[0]
    assert mapped.valid_records == 1
    assert mapped.invalid_records == 1
    assert mapped.validation_errors[0].row == 2
    assert preview.estimated_changes.new_sales == 1

    print(f"Pattern: {analysis.overall_pattern} ({analysis.confidence:.2f})")
    print(f"Valid/invalid: {mapped.valid_records}/{mapped.invalid_records}")


if __name__ == "__main__":
    main()
    print("OK")
