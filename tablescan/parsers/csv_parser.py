import codecs
import csv
import logging
import os
import sys

from ..errors import FileReadError, RowReadError
from .file_parser import BaseParser

ENCODINGS = ["utf-8-sig", "cp1252", "latin-1"]
DELIMITERS = [",", ";", "\t", "|"]
SAMPLE_BYTES = 64 * 1024


def raise_field_size_limit():
    """Lift the csv module cap on cell length as far as the platform allows"""
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return limit
        except OverflowError:
            # C long is 32 bits on some platforms
            limit //= 10


raise_field_size_limit()


def detect_encoding(file_path):
    """Pick the first candidate encoding that decodes a leading sample"""
    try:
        with open(file_path, "rb") as f:
            sample = f.read(SAMPLE_BYTES)
    except OSError as e:
        raise FileReadError(f"open csv: {e}") from e
    for encoding in ENCODINGS:
        decoder = codecs.getincrementaldecoder(encoding)()
        try:
            # final=False tolerates a multi-byte sequence cut by the sample
            decoder.decode(sample, final=False)
            return encoding
        except UnicodeDecodeError:
            continue
    return ENCODINGS[-1]


def sniff_delimiter(file_path, header_line):
    """Tab for .tsv/.tab files, otherwise the most frequent candidate in the header"""
    if os.path.splitext(file_path)[1].lower() in (".tsv", ".tab"):
        return "\t"
    best, best_count = ",", 0
    for sep in DELIMITERS:
        count = header_line.count(sep)
        if count > best_count:
            best, best_count = sep, count
    return best


class CSVParser(BaseParser):
    """Row source for delimited text files"""

    def __init__(self, delimiter=None):
        self.delimiter = delimiter

    def iter_rows(self, file_path):
        """Yield the header and then each data row as a list of strings"""
        name = os.path.basename(file_path)
        encoding = detect_encoding(file_path)
        try:
            f = open(file_path, newline="", encoding=encoding, errors="replace")
        except OSError as e:
            raise FileReadError(f"open csv: {e}") from e

        with f:
            delimiter = self.delimiter
            if not delimiter:
                delimiter = sniff_delimiter(file_path, f.readline())
                f.seek(0)
            logging.info(f"Reading {name} with encoding={encoding}, delimiter={delimiter!r}")

            reader = csv.reader(f, delimiter=delimiter, skipinitialspace=True)
            header_seen = False
            data_rows = 0
            while True:
                try:
                    row = next(reader)
                except StopIteration:
                    return
                except csv.Error as e:
                    logging.error(f"Error parsing CSV file {file_path}: {e}")
                    if not header_seen:
                        raise FileReadError(f"read header of '{name}': {e}") from e
                    raise RowReadError(name, data_rows + 1, e) from e
                # blank lines carry no cells
                if not row:
                    continue
                if header_seen:
                    data_rows += 1
                header_seen = True
                yield row
