import os
from abc import ABC, abstractmethod


class BaseParser(ABC):
    """Abstract base class for row sources"""

    @abstractmethod
    def iter_rows(self, file_path):
        """Yield the header row, then each data row, as lists of strings"""
        pass


class FileParserFactory:
    """Factory class to get appropriate row source for file type"""

    SPREADSHEET_TYPES = {"xlsx", "xlsm"}
    DELIMITED_TYPES = {"csv", "tsv", "tab", "txt"}

    def get_parser(self, file_type, options, sheet_name="", sheet_index=1):
        """Get parser for a file extension (with or without the leading dot)"""
        from .csv_parser import CSVParser
        from .excel_parser import ExcelParser

        file_type = file_type.lower().lstrip(".")
        if file_type in self.SPREADSHEET_TYPES:
            return ExcelParser(sheet_name=sheet_name, sheet_index=sheet_index)
        if file_type in self.DELIMITED_TYPES:
            return CSVParser(delimiter=options.delimiter)
        raise ValueError(f"Unsupported file type: {file_type}")

    def get_parser_for_path(self, file_path, options, sheet_name="", sheet_index=1):
        """Spreadsheets by extension; anything else is read as delimited text"""
        ext = os.path.splitext(file_path)[1].lower().lstrip(".")
        if ext not in self.SPREADSHEET_TYPES:
            ext = "csv"
        return self.get_parser(ext, options, sheet_name, sheet_index)
