import logging
import os
import posixpath
import xml.etree.ElementTree as ET
import zipfile
import zlib
from collections import namedtuple

from ..errors import ContainerError, FileReadError, SheetNotFoundError
from .xml_parser import parse_relationships, parse_shared_strings, parse_workbook

WORKBOOK_PATH = "xl/workbook.xml"
RELS_PATH = "xl/_rels/workbook.xml.rels"
SHARED_STRINGS_PATH = "xl/sharedStrings.xml"

SheetEntry = namedtuple("SheetEntry", ["name", "sheet_id", "rel_id"])


def normalize_rel_path(target):
    """Relationship target -> ZIP member name.

    Targets may be absolute ('/xl/worksheets/sheet1.xml') or relative to the
    workbook ('worksheets/sheet1.xml'); both map to 'xl/worksheets/sheet1.xml'.
    """
    if target.startswith("/"):
        target = target[1:]
    if target.startswith("xl/"):
        return target
    return posixpath.join("xl", target)


def guess_sheet_path(index):
    return f"xl/worksheets/sheet{index}.xml"


class XlsxContainer:
    """Read access to the parts of an .xlsx archive needed to stream one sheet"""

    def __init__(self, file_path):
        self.file_path = file_path
        self.name = os.path.basename(file_path)
        try:
            self.archive = zipfile.ZipFile(file_path)
        except FileNotFoundError as e:
            raise FileReadError(f"read xlsx: {e}") from e
        except zipfile.BadZipFile as e:
            raise ContainerError(f"open xlsx '{self.name}': {e}") from e
        except OSError as e:
            raise FileReadError(f"read xlsx: {e}") from e
        self._sheets = None
        self._relationships = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.archive.close()

    def has_member(self, member):
        try:
            self.archive.getinfo(member)
        except KeyError:
            return False
        return True

    def open_member(self, member):
        """Binary stream of one archive member; ContainerError if it is absent"""
        try:
            return self.archive.open(member)
        except KeyError as e:
            raise ContainerError(f"'{member}' not found in '{self.name}'") from e
        except (zipfile.BadZipFile, RuntimeError) as e:
            raise ContainerError(f"open '{member}' in '{self.name}': {e}") from e

    def _parse_optional(self, member, parse, empty):
        if not self.has_member(member):
            logging.debug(f"{self.name}: no {member}")
            return empty
        try:
            with self.open_member(member) as stream:
                return parse(stream)
        except (ET.ParseError, zipfile.BadZipFile, zlib.error, EOFError) as e:
            raise ContainerError(f"parse '{member}' in '{self.name}': {e}") from e

    @property
    def sheets(self):
        """Declared sheets in workbook order"""
        if self._sheets is None:
            entries = self._parse_optional(WORKBOOK_PATH, parse_workbook, [])
            self._sheets = [SheetEntry(*entry) for entry in entries]
        return self._sheets

    @property
    def relationships(self):
        if self._relationships is None:
            self._relationships = self._parse_optional(RELS_PATH, parse_relationships, {})
        return self._relationships

    def sheet_names(self):
        return [sheet.name for sheet in self.sheets]

    def shared_strings(self):
        return self._parse_optional(SHARED_STRINGS_PATH, parse_shared_strings, [])

    def resolve_sheet(self, sheet_name="", sheet_index=1):
        """Archive member holding the requested worksheet.

        A name wins over an index and is matched case-insensitively. An index
        (1-based, non-positive means 1) is matched against sheetId first and
        otherwise guessed as xl/worksheets/sheetN.xml.
        """
        if sheet_name:
            for sheet in self.sheets:
                if sheet.name.lower() == sheet_name.lower():
                    target = self.relationships.get(sheet.rel_id)
                    if target:
                        member = normalize_rel_path(target)
                        logging.info(f"{self.name}: sheet '{sheet.name}' -> {member}")
                        return member
                    break
            raise SheetNotFoundError(sheet_name, self.name, self.sheet_names())

        index = sheet_index if sheet_index and sheet_index > 0 else 1
        for sheet in self.sheets:
            if sheet.sheet_id == index:
                target = self.relationships.get(sheet.rel_id)
                if target:
                    member = normalize_rel_path(target)
                    logging.info(f"{self.name}: sheet #{index} -> {member}")
                    return member
                break
        member = guess_sheet_path(index)
        logging.info(f"{self.name}: sheet #{index} not declared, trying {member}")
        return member
