class AnalysisError(Exception):
    """Base class for failures surfaced to callers of the analysis engine"""


class FileReadError(AnalysisError):
    """The input file is missing or unreadable"""


class EmptyHeaderError(AnalysisError):
    """The input has no header row, or the header has no columns"""

    def __init__(self, file_name):
        self.file_name = file_name
        super().__init__(f"no header row found in '{file_name}'")


class RowReadError(AnalysisError):
    """A data row could not be read; row_number is 1-based"""

    def __init__(self, file_name, row_number, cause):
        self.file_name = file_name
        self.row_number = row_number
        super().__init__(f"read row {row_number} of '{file_name}': {cause}")


class SheetNotFoundError(AnalysisError):

    def __init__(self, sheet_name, workbook, available_sheets):
        self.sheet_name = sheet_name
        self.workbook = workbook
        self.available_sheets = list(available_sheets)
        super().__init__(
            f"sheet '{sheet_name}' not found in workbook '{workbook}'.\n"
            f"Available sheets: {', '.join(self.available_sheets)}"
        )


class ContainerError(AnalysisError):
    """Corrupt ZIP or XML inside a spreadsheet container"""


class SummaryTooLargeError(AnalysisError):

    def __init__(self, report, length, limit, hints):
        self.length = length
        self.limit = limit
        lines = [
            f"analysis of '{report.name}' produced {length} character summary (limit: {limit}).",
            f"  Rows: {report.rows}, Columns: {len(report.columns)}",
            "  This file may be too large or complex.",
            "",
            "Solutions:",
        ]
        lines.extend(f"  {i}. {hint}" for i, hint in enumerate(hints, start=1))
        super().__init__("\n".join(lines))


class OptionsError(AnalysisError, ValueError):
    """An option value supplied by a caller is not supported"""
