class ImportAnalysisError(Exception):
    pass


class WorkbookParseError(ImportAnalysisError):
    """Raised when uploaded bytes cannot be read as a workbook."""
