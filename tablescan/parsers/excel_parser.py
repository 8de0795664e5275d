import logging
import xml.etree.ElementTree as ET
import zipfile
import zlib

from ..errors import ContainerError
from .file_parser import BaseParser
from .xlsx_container import XlsxContainer
from .xml_parser import SheetRowReader


class ExcelParser(BaseParser):
    """Row source for .xlsx workbooks, read straight from the ZIP container"""

    def __init__(self, sheet_name="", sheet_index=1):
        self.sheet_name = sheet_name or ""
        self.sheet_index = sheet_index

    def iter_rows(self, file_path):
        """Yield the rows of the selected sheet; the first one is the header"""
        with XlsxContainer(file_path) as container:
            member = container.resolve_sheet(self.sheet_name, self.sheet_index)
            shared = container.shared_strings()
            logging.info(f"Reading {container.name}: {member}, {len(shared)} shared strings")

            reader = SheetRowReader(shared)
            try:
                with container.open_member(member) as stream:
                    yield from reader.rows(stream)
            except (ET.ParseError, zipfile.BadZipFile, zlib.error, EOFError) as e:
                logging.error(f"Error parsing Excel file {file_path}: {e}")
                raise ContainerError(f"parse '{member}' in '{container.name}': {e}") from e
