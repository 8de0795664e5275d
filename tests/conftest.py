import zipfile
from xml.sax.saxutils import escape

import pandas as pd
import pytest

from tablescan.models import default_options

METRICS_HEADER = ["Group", "Concentration (g/L)", "Temp (°F)", "Score", "LocaleNumber", "Category", "Note"]
METRICS_ROWS = [
    ["A", "0,5", "70", "10,0", "1.000,0", "alpha", "first"],
    ["A", "0,6", "71", "11,0", "1.100,0", "alpha", "second"],
    ["A", "0,55", "69", "9,5", "0.900,0", "beta", "third"],
    ["B", "0,7", "75", "10,5", "1.050,0", "alpha", "fourth"],
    ["B", "0,65", "74", "9,8", "0.980,0", "beta", "fifth"],
    ["B", "0,68", "73", "10,2", "1.020,0", "alpha", "sixth"],
    ["A", "0,52", "68", "8,8", "0.880,0", "gamma", "seventh"],
    ["B", "0,75", "76", "9,7", "0.970,0", "beta", "eighth"],
    ["A", "3,0", "95", "50,0", "5.000,0", "alpha", "ninth"],
    ["B", "0,66", "72", "10,1", "1.010,0", "gamma", "tenth"],
]

CONTENT_TYPES = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types"/>'
)
MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"


def column_letters(index):
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def sheet_xml(rows):
    """Worksheet XML with every cell as an inline string"""
    parts = [f'<?xml version="1.0" encoding="UTF-8"?><worksheet xmlns="{MAIN_NS}"><sheetData>']
    for r, row in enumerate(rows, start=1):
        parts.append(f'<row r="{r}">')
        for c, value in enumerate(row):
            if value == "":
                continue
            ref = f"{column_letters(c)}{r}"
            parts.append(f'<c r="{ref}" t="inlineStr"><is><t>{escape(value)}</t></is></c>')
        parts.append("</row>")
    parts.append("</sheetData></worksheet>")
    return "".join(parts)


def write_workbook(path, sheets, target_prefix="worksheets/", extra_members=None):
    """Hand-built .xlsx container.

    sheets is a list of (name, sheet_id, rows); the relationship targets are
    target_prefix + 'sheetN.xml' where N is the position in the list.
    """
    workbook = [f'<?xml version="1.0" encoding="UTF-8"?><workbook xmlns="{MAIN_NS}" xmlns:r="{REL_NS}"><sheets>']
    rels = ['<?xml version="1.0" encoding="UTF-8"?>'
            '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">']
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("[Content_Types].xml", CONTENT_TYPES)
        for position, (name, sheet_id, rows) in enumerate(sheets, start=1):
            workbook.append(f'<sheet name="{escape(name)}" sheetId="{sheet_id}" r:id="rId{position}"/>')
            rels.append(
                f'<Relationship Id="rId{position}" Type="{REL_NS}/worksheet" '
                f'Target="{target_prefix}sheet{position}.xml"/>'
            )
            zf.writestr(f"xl/worksheets/sheet{position}.xml", sheet_xml(rows))
        workbook.append("</sheets></workbook>")
        rels.append("</Relationships>")
        zf.writestr("xl/workbook.xml", "".join(workbook))
        zf.writestr("xl/_rels/workbook.xml.rels", "".join(rels))
        for member, content in (extra_members or {}).items():
            zf.writestr(member, content)
    return path


@pytest.fixture
def metrics_frame():
    return pd.DataFrame(METRICS_ROWS, columns=METRICS_HEADER)


@pytest.fixture
def metrics_csv(tmp_path, metrics_frame):
    """Semicolon-separated file with European number formatting"""
    path = tmp_path / "metrics.csv"
    metrics_frame.to_csv(path, sep=";", index=False, encoding="utf-8")
    return str(path)


@pytest.fixture
def metrics_xlsx(tmp_path):
    """Two-sheet workbook; the data lives on the second sheet, 'Data'"""
    path = tmp_path / "analysis_dataset.xlsx"
    write_workbook(path, [
        ("Ignore", 1, [["placeholder"]]),
        ("Data", 2, [METRICS_HEADER] + METRICS_ROWS),
    ])
    return str(path)


@pytest.fixture
def metrics_options():
    return default_options().replace(
        delimiter=";",
        sample_rows=3,
        max_rows=9,
        group_by=["Group"],
        correlations=True,
        corr_per_group=True,
        outliers=True,
        decimal_separator=",",
        thousands_separator=".",
    )
