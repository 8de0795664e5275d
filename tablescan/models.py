import math
import dataclasses
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Tuple

import pandas as pd

DEFAULT_UNIT_TARGETS = {
    "g/L": "mg/L",
    "ug/L": "mg/L",
    "°F": "°C",
}

DEFAULT_SAMPLE_ROWS = 5
DEFAULT_OUTLIER_THRESHOLD = 3.5


@dataclass(frozen=True)
class Options:
    """Analysis configuration, fixed for the lifetime of one analysis run"""
    max_rows: int = 0
    sample_rows: int = DEFAULT_SAMPLE_ROWS
    delimiter: Optional[str] = None
    group_by: Tuple[str, ...] = ()
    correlations: bool = False
    corr_per_group: bool = False
    decimal_separator: Optional[str] = None
    thousands_separator: Optional[str] = None
    outliers: bool = False
    outlier_threshold: float = DEFAULT_OUTLIER_THRESHOLD
    unit_normalize: bool = True
    unit_targets: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_UNIT_TARGETS))

    def __post_init__(self):
        # callers may pass lists; store private copies
        object.__setattr__(self, "group_by", tuple(self.group_by or ()))
        object.__setattr__(self, "unit_targets", dict(self.unit_targets or {}))

    def replace(self, **changes):
        """Return a copy with the given fields changed"""
        return dataclasses.replace(self, **changes)

    @property
    def row_limit(self):
        return self.max_rows if self.max_rows and self.max_rows > 0 else None

    @property
    def sample_limit(self):
        return self.sample_rows if self.sample_rows >= 0 else DEFAULT_SAMPLE_ROWS

    @property
    def effective_threshold(self):
        return self.outlier_threshold if self.outlier_threshold > 0 else DEFAULT_OUTLIER_THRESHOLD


def default_options():
    """Defaults used by callers that do not configure anything themselves"""
    return Options(max_rows=100000, outliers=True)


@dataclass
class CategoryCount:
    value: str
    count: int


@dataclass
class ColumnSummary:
    """Finalized view of one column"""
    name: str
    kind: str = "unknown"  # numeric|datetime|categorical|text|unknown
    unit: str = ""
    non_null: int = 0
    missing: int = 0
    unique: int = 0
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    std: float = 0.0
    outliers_count: int = 0
    outliers_max_abs_z: float = 0.0
    outlier_threshold: float = 0.0
    top_values: List[CategoryCount] = field(default_factory=list)
    example_texts: List[str] = field(default_factory=list)

    @property
    def missing_pct(self):
        total = self.non_null + self.missing
        if total == 0:
            return 0.0
        return self.missing * 100.0 / total


@dataclass
class NumSummary:
    count: int
    min: float
    max: float
    mean: float


@dataclass
class PairCorr:
    a: str
    b: str
    r: float


@dataclass
class GroupResult:
    key: str
    size: int
    metrics: Dict[str, NumSummary] = field(default_factory=dict)
    corr_pairs: List[PairCorr] = field(default_factory=list)


@dataclass
class CorrMatrix:
    """Symmetric Pearson matrix over the numeric columns, row-major"""
    columns: List[str]
    values: List[List[float]]

    def value(self, a, b):
        return self.values[self.columns.index(a)][self.columns.index(b)]


@dataclass
class Report:
    """Result of analyzing one tabular file"""
    name: str
    rows: int = 0
    processed: int = 0
    columns: List[ColumnSummary] = field(default_factory=list)
    samples: List[List[str]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    groups: List[GroupResult] = field(default_factory=list)
    correlations: Optional[CorrMatrix] = None

    def column(self, name):
        for col in self.columns:
            if col.name == name:
                return col
        raise KeyError(name)

    def top_correlations(self, limit=10):
        """Strongest global pairs by |r|, ties broken by concatenated names"""
        if self.correlations is None:
            return []
        names = self.correlations.columns
        pairs = []
        for i in range(len(names)):
            for j in range(i + 1, len(names)):
                pairs.append(PairCorr(names[i], names[j], self.correlations.values[i][j]))
        pairs.sort(key=lambda p: (-abs(p.r), p.a + p.b))
        return pairs[:limit]

    def to_dict(self):
        """Plain-dict view suitable for JSON"""
        data = asdict(self)
        for col in data["columns"]:
            for key in ("min", "max", "mean", "std"):
                if not math.isfinite(col[key]):
                    col[key] = None
        return data

    def schema_frame(self):
        """One row per column with the headline statistics"""
        records = []
        for col in self.columns:
            records.append({
                "column": col.name,
                "kind": col.kind,
                "unit": col.unit,
                "non_null": col.non_null,
                "missing": col.missing,
                "missing_pct": round(col.missing_pct, 1),
                "min": col.min if col.kind == "numeric" else None,
                "max": col.max if col.kind == "numeric" else None,
                "mean": col.mean if col.kind == "numeric" else None,
                "std": col.std if col.kind == "numeric" else None,
                "outliers": col.outliers_count if col.kind == "numeric" else None,
                "unique": col.unique if col.kind == "categorical" else None,
                "top_values": ", ".join(f"{tv.value}({tv.count})" for tv in col.top_values),
            })
        return pd.DataFrame.from_records(records, columns=[
            "column", "kind", "unit", "non_null", "missing", "missing_pct",
            "min", "max", "mean", "std", "outliers", "unique", "top_values",
        ])
