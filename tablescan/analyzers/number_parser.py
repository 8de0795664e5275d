"""Locale-aware numeric parsing and unit handling for cell values and headers"""
import re

NBSP = "\u00a0"

# Plain decimal or scientific notation once separators have been rewritten
NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

UNIT_PATTERNS = [
    re.compile(r"^(.*)\s*\(([^)]+)\)\s*$"),   # Alpha (%)
    re.compile(r"^(.*)\s*\[([^\]]+)\]\s*$"),  # Mass [mg/L]
    re.compile(r"^(.*?)[_\s-]+(mg/L|g/L|ug/L|°[CF]|Brix|%|ppm|ppb)$"),
]

UNIT_CONVERSIONS = {
    ("g/L", "mg/L"): lambda x: x * 1000,
    ("ug/L", "mg/L"): lambda x: x / 1000,
    ("°F", "°C"): lambda x: (x - 32) * 5.0 / 9.0,
}


def resolve_separators(raw, decimal=None, thousands=None):
    """Pick the (decimal, thousands) pair for one value.

    Configured separators win when the decimal one is set. Otherwise, when both '.' and ',' occur the
    rightmost one is the decimal separator; a lone ',' is decimal; the
    default is '.'. A thousands value of None means "strip the common
    grouping characters that are not the decimal separator".
    """
    if decimal:
        return decimal, thousands
    comma = raw.rfind(",")
    dot = raw.rfind(".")
    if comma >= 0 and dot >= 0:
        if comma > dot:
            return ",", "."
        return ".", ","
    if comma >= 0:
        return ",", thousands
    return ".", thousands


def strip_percent(raw):
    """Return (value without a trailing '%', whether one was present)"""
    raw = raw.strip()
    if raw.endswith("%"):
        return raw[:-1].strip(), True
    return raw, False


def parse_numeric(value, decimal=None, thousands=None):
    """Parse a cell into a float, or return None when it is not numeric"""
    raw, _ = strip_percent(value.replace(NBSP, " "))
    if not raw:
        return None
    dec, thou = resolve_separators(raw, decimal, thousands)
    if thou is None:
        for sep in (",", ".", " "):
            if sep != dec:
                raw = raw.replace(sep, "")
    elif thou != dec:
        raw = raw.replace(thou, "")
    if dec != ".":
        raw = raw.replace(dec, ".")
    if not NUMBER_RE.match(raw):
        return None
    return float(raw)


def split_units(name):
    """Split a header like 'Temp (°F)' into ('Temp', '°F')"""
    s = name.strip()
    for pattern in UNIT_PATTERNS:
        m = pattern.match(s)
        if m:
            base = m.group(1).strip()
            unit = m.group(2).strip()
            if base and unit:
                return base, unit
    return s, ""


def normalize_unit(x, unit, targets):
    """Convert x from unit to its configured target unit.

    Returns (value, unit, converted). Units without a target, or targets
    without a known conversion, come back unchanged.
    """
    if not targets or unit not in targets:
        return x, unit, False
    target = targets[unit]
    convert = UNIT_CONVERSIONS.get((unit, target))
    if convert is None:
        return x, unit, False
    return convert(x), target, True
