"""Forward-only parsing of the XML parts of a spreadsheet container.

Everything here works on the pull events of xml.etree.ElementTree, so a
worksheet is never materialized as a tree: elements are discarded as soon as
their row has been emitted.
"""
import enum
import xml.etree.ElementTree as ET

CHUNK_SIZE = 64 * 1024


def local_name(tag):
    """Tag without its '{namespace}' prefix"""
    return tag.rsplit("}", 1)[-1]


def attribute(elem, name):
    """Attribute lookup that ignores namespace prefixes (r:id, etc.)"""
    for key, value in elem.attrib.items():
        if local_name(key) == name:
            return value
    return None


def iter_events(stream, events=("start", "end")):
    """Feed a binary stream through a pull parser in chunks"""
    parser = ET.XMLPullParser(events)
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        parser.feed(chunk)
        yield from parser.read_events()
    parser.close()
    yield from parser.read_events()


def column_index(ref):
    """0-based column from a cell reference: 'A1' -> 0, 'C12' -> 2, 'AA3' -> 26.

    Returns -1 when the reference carries no column letters.
    """
    index = 0
    for ch in ref:
        if "A" <= ch <= "Z":
            index = index * 26 + (ord(ch) - ord("A") + 1)
        elif "a" <= ch <= "z":
            index = index * 26 + (ord(ch) - ord("a") + 1)
        else:
            break
    return index - 1


def parse_workbook(stream):
    """Sheet entries of xl/workbook.xml as (name, sheet_id, relationship_id) tuples"""
    sheets = []
    for event, elem in iter_events(stream, events=("start",)):
        if local_name(elem.tag) != "sheet":
            continue
        sheet_id = attribute(elem, "sheetId") or ""
        sheets.append((
            attribute(elem, "name") or "",
            int(sheet_id) if sheet_id.isdigit() else 0,
            attribute(elem, "id") or "",
        ))
    return sheets


def parse_relationships(stream):
    """Map of relationship id -> raw target path"""
    rels = {}
    for event, elem in iter_events(stream, events=("start",)):
        if local_name(elem.tag) != "Relationship":
            continue
        rel_id = elem.get("Id")
        target = elem.get("Target")
        if rel_id and target:
            rels[rel_id] = target
    return rels


def parse_shared_strings(stream):
    """Ordered shared string table; rich-text runs are concatenated"""
    strings = []
    parts = []
    phonetic = 0
    for event, elem in iter_events(stream):
        tag = local_name(elem.tag)
        if event == "start":
            if tag == "si":
                parts = []
            elif tag == "rPh":
                phonetic += 1
            continue
        if tag == "t" and not phonetic:
            parts.append(elem.text or "")
        elif tag == "rPh":
            phonetic -= 1
        elif tag == "si":
            strings.append("".join(parts))
            elem.clear()
    return strings


class ReaderState(enum.Enum):
    IDLE = "idle"
    IN_ROW = "in_row"
    IN_CELL = "in_cell"
    IN_VALUE = "in_value"


class SheetRowReader:
    """State machine turning worksheet pull events into rows of strings.

    IDLE -> IN_ROW on <row>, IN_ROW -> IN_CELL on <c>, IN_CELL -> IN_VALUE on
    <v> or <t>; the matching end tags walk back. A row is emitted when </row>
    closes, padded to its widest referenced column.
    """

    def __init__(self, shared_strings):
        self.shared_strings = shared_strings
        self.state = ReaderState.IDLE
        self.row = []
        self.width = 0
        self.next_col = 0
        self.cell_col = 0
        self.cell_type = None
        self.cell_text = []
        self._container = None

    def handle(self, event, elem):
        """Process one pull event; returns a finished row or None"""
        tag = local_name(elem.tag)
        if event == "start":
            self._start(tag, elem)
            return None
        return self._end(tag, elem)

    def _start(self, tag, elem):
        if tag == "sheetData":
            self._container = elem
        elif self.state is ReaderState.IDLE and tag == "row":
            self.state = ReaderState.IN_ROW
            self.row = []
            self.width = 0
            self.next_col = 0
        elif self.state is ReaderState.IN_ROW and tag == "c":
            self.state = ReaderState.IN_CELL
            col = column_index(elem.get("r", ""))
            self.cell_col = col if col >= 0 else self.next_col
            self.cell_type = elem.get("t")
            self.cell_text = []
        elif self.state is ReaderState.IN_CELL and tag in ("v", "t"):
            self.state = ReaderState.IN_VALUE

    def _end(self, tag, elem):
        if self.state is ReaderState.IN_VALUE and tag in ("v", "t"):
            self.cell_text.append(elem.text or "")
            self.state = ReaderState.IN_CELL
        elif self.state is ReaderState.IN_CELL and tag == "c":
            self._place(self.cell_col, self._cell_value())
            self.state = ReaderState.IN_ROW
        elif self.state is ReaderState.IN_ROW and tag == "row":
            self.state = ReaderState.IDLE
            row = self.row
            if len(row) < self.width:
                row.extend([""] * (self.width - len(row)))
            # drop the finished subtree so long sheets stay flat in memory
            if self._container is not None:
                self._container.clear()
            return row
        return None

    def _cell_value(self):
        value = "".join(self.cell_text)
        if self.cell_type == "s":
            try:
                index = int(value.strip())
            except ValueError:
                return ""
            if 0 <= index < len(self.shared_strings):
                return self.shared_strings[index]
            return ""
        return value

    def _place(self, col, value):
        if col >= len(self.row):
            self.row.extend([""] * (col + 1 - len(self.row)))
        self.row[col] = value
        self.next_col = col + 1
        if col + 1 > self.width:
            self.width = col + 1

    def rows(self, stream):
        """Yield every row of a worksheet stream"""
        for event, elem in iter_events(stream):
            row = self.handle(event, elem)
            if row is not None:
                yield row
