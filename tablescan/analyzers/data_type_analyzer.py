import math
from datetime import datetime

from ..models import CategoryCount, ColumnSummary
from .number_parser import normalize_unit, parse_numeric, split_units, strip_percent
from .outlier_analyzer import detect_outliers

# Tried in order, first match wins
DATETIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%S%z",     # RFC 3339
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
]

MAX_CATEGORIES = 10000
MAX_CATEGORY_LENGTH = 64
MAX_EXAMPLE_TEXTS = 3
MAX_TOP_VALUES = 8


def parse_datetime(value):
    """Return a datetime for the first matching layout, or None"""
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


class ColumnAccumulator:
    """Streaming classifier and statistics for a single column"""

    def __init__(self, header, options):
        self.options = options
        self.name, self.unit = split_units(header)
        self.source_unit = self.unit
        self.non_null = 0
        self.missing = 0

        # Welford state
        self.n = 0
        self.mean = 0.0
        self.m2 = 0.0
        self.min = math.inf
        self.max = -math.inf

        self.numeric_hits = 0
        self.datetime_hits = 0
        self.text_hits = 0
        self.categories = {}
        self.examples = []
        # Raw values for the MAD pass; only kept when outliers are requested
        self.values = [] if options.outliers else None

    def observe(self, cell):
        """Classify one cell and update the running state.

        Returns the (unit-normalized) numeric value, or None when the cell
        is empty or not numeric.
        """
        v = cell.strip()
        if not v:
            self.missing += 1
            return None
        self.non_null += 1

        _, has_percent = strip_percent(v)
        if has_percent and not self.unit:
            self.unit = "%"
            if not self.source_unit:
                self.source_unit = "%"

        x = parse_numeric(v, self.options.decimal_separator, self.options.thousands_separator)
        if x is not None:
            if self.options.unit_normalize and self.source_unit:
                x, unit, converted = normalize_unit(x, self.source_unit, self.options.unit_targets)
                if converted:
                    self.unit = unit
            self._add_number(x)
            return x

        if parse_datetime(v) is not None:
            self.datetime_hits += 1
            return None

        self.text_hits += 1
        if len(v) <= MAX_CATEGORY_LENGTH:
            if v in self.categories:
                self.categories[v] += 1
            elif len(self.categories) < MAX_CATEGORIES:
                self.categories[v] = 1
        if len(self.examples) < MAX_EXAMPLE_TEXTS:
            self.examples.append(v)
        return None

    def _add_number(self, x):
        self.numeric_hits += 1
        self.n += 1
        if x < self.min:
            self.min = x
        if x > self.max:
            self.max = x
        delta = x - self.mean
        self.mean += delta / self.n
        self.m2 += delta * (x - self.mean)
        if self.values is not None:
            self.values.append(x)

    @property
    def kind(self):
        if self.numeric_hits > 0 and self.numeric_hits >= self.datetime_hits and self.numeric_hits >= self.text_hits:
            return "numeric"
        if self.datetime_hits > 0 and self.datetime_hits >= self.text_hits:
            return "datetime"
        if self.categories:
            return "categorical"
        if self.text_hits > 0:
            return "text"
        return "unknown"

    def finalize(self):
        """Freeze the running state into a ColumnSummary.

        The outlier value buffer is released here whatever the outcome.
        """
        kind = self.kind
        summary = ColumnSummary(
            name=self.name,
            kind=kind,
            unit=self.unit,
            non_null=self.non_null,
            missing=self.missing,
        )
        if kind == "numeric":
            summary.min = self.min
            summary.max = self.max
            summary.mean = self.mean
            if self.n > 1:
                summary.std = math.sqrt(self.m2 / (self.n - 1))
            if self.values is not None:
                stats = detect_outliers(self.values, self.options.effective_threshold)
                if stats is not None:
                    summary.outliers_count = stats.count
                    summary.outliers_max_abs_z = stats.max_abs_z
                    summary.outlier_threshold = stats.threshold
        elif kind == "categorical":
            tops = sorted(self.categories.items(), key=lambda kv: (-kv[1], kv[0]))
            summary.top_values = [CategoryCount(value, count) for value, count in tops[:MAX_TOP_VALUES]]
            summary.unique = len(self.categories)
        elif kind == "text":
            summary.example_texts = list(self.examples)
        self.values = None
        return summary
