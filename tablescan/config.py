import os

from .errors import OptionsError
from .models import DEFAULT_OUTLIER_THRESHOLD, default_options

DELIMITER_TOKENS = {",": ",", ";": ";", "tab": "\t", "\\t": "\t", "\t": "\t", "|": "|"}
DECIMAL_TOKENS = {".": ".", "dot": ".", ",": ",", "comma": ","}
THOUSANDS_TOKENS = {",": ",", ".": ".", "space": " ", " ": " "}
TRUE_TOKENS = {"1", "true", "yes", "on"}
FALSE_TOKENS = {"0", "false", "no", "off"}


class Config:
    """Flask settings, overridable through the environment"""
    SECRET_KEY = os.environ.get("SESSION_SECRET", "dev-secret-key-change-in-production")
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "uploads")
    EXPORT_FOLDER = os.environ.get("EXPORT_FOLDER", "exports")
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", 50 * 1024 * 1024))  # 50MB max file size
    MAX_SUMMARY_CHARS = int(os.environ.get("MAX_SUMMARY_CHARS", 100000))


def _token(form, key, table, label):
    raw = form.get(key)
    if raw is None or raw == "":
        return None
    value = table.get(raw.strip().lower() if raw.strip() else raw)
    if value is None:
        raise OptionsError(f"unsupported {label}: {raw!r}")
    return value


def _flag(form, key, default):
    raw = form.get(key)
    if raw is None or raw.strip() == "":
        return default
    raw = raw.strip().lower()
    if raw in TRUE_TOKENS:
        return True
    if raw in FALSE_TOKENS:
        return False
    raise OptionsError(f"{key} must be a boolean, got {raw!r}")


def _number(form, key, default, cast):
    raw = form.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise OptionsError(f"{key} must be a number, got {raw!r}") from e


def _group_by(form):
    if hasattr(form, "getlist"):
        raw_values = form.getlist("group_by")
    else:
        raw = form.get("group_by")
        raw_values = [raw] if raw else []
    names = []
    for raw in raw_values:
        names.extend(part.strip() for part in raw.split(",") if part.strip())
    return tuple(names)


def options_from_form(form):
    """Options plus (sheet_name, sheet_index) from string form fields"""
    base = default_options()
    options = base.replace(
        max_rows=_number(form, "max_rows", base.max_rows, int),
        sample_rows=_number(form, "sample_rows", base.sample_rows, int),
        delimiter=_token(form, "delimiter", DELIMITER_TOKENS, "delimiter"),
        group_by=_group_by(form),
        correlations=_flag(form, "correlations", base.correlations),
        corr_per_group=_flag(form, "corr_per_group", base.corr_per_group),
        decimal_separator=_token(form, "decimal", DECIMAL_TOKENS, "decimal separator"),
        thousands_separator=_token(form, "thousands", THOUSANDS_TOKENS, "thousands separator"),
        outliers=_flag(form, "outliers", base.outliers),
        outlier_threshold=_number(form, "outlier_threshold", DEFAULT_OUTLIER_THRESHOLD, float),
        unit_normalize=_flag(form, "unit_normalize", base.unit_normalize),
    )
    if options.decimal_separator and options.decimal_separator == options.thousands_separator:
        raise OptionsError("decimal and thousands separators must differ")
    sheet_name = (form.get("sheet_name") or "").strip()
    sheet_index = _number(form, "sheet_index", 1, int)
    return options, sheet_name, sheet_index
