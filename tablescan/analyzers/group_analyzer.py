import logging

from ..models import GroupResult, NumSummary
from ..utils.formatting import safe_value
from .correlation_analyzer import PairwiseCorrelation

MAX_GROUPS = 20


class GroupAccumulator:
    """Row count, per-column numeric summaries and optional pair statistics for one key"""

    def __init__(self, with_correlations):
        self.size = 0
        self.sums = {}
        self.counts = {}
        self.mins = {}
        self.maxs = {}
        self.correlation = PairwiseCorrelation() if with_correlations else None

    def add_number(self, index, x):
        self.sums[index] = self.sums.get(index, 0.0) + x
        self.counts[index] = self.counts.get(index, 0) + 1
        if index not in self.mins or x < self.mins[index]:
            self.mins[index] = x
        if index not in self.maxs or x > self.maxs[index]:
            self.maxs[index] = x

    def summary(self, index):
        count = self.counts.get(index, 0)
        if count == 0:
            return None
        return NumSummary(count=count, min=self.mins[index], max=self.maxs[index], mean=self.sums[index] / count)


class GroupByAggregator:
    """Splits rows by the values of the requested group-by columns"""

    def __init__(self, group_by, column_names, with_correlations=False):
        self.column_names = column_names
        self.with_correlations = with_correlations
        self.groups = {}

        # case-insensitive lookup on cleaned names; the last duplicate wins
        index = {name.lower(): i for i, name in enumerate(column_names)}
        self.key_columns = []
        for name in group_by:
            i = index.get(name.strip().lower())
            if i is None:
                logging.warning(f"group-by column '{name}' not found; ignoring it")
                continue
            self.key_columns.append(i)

    @property
    def enabled(self):
        return bool(self.key_columns)

    def group_key(self, row):
        """'name=value' parts joined by ' | ', or None when no key column has a value"""
        parts = []
        for i in self.key_columns:
            value = row[i].strip() if i < len(row) else ""
            if not value:
                continue
            parts.append(f"{self.column_names[i]}={safe_value(value)}")
        if not parts:
            return None
        return " | ".join(parts)

    def add_row(self, key, row_numbers):
        """Count a row under key and fold in its numeric values"""
        group = self.groups.get(key)
        if group is None:
            group = self.groups[key] = GroupAccumulator(self.with_correlations)
        group.size += 1
        for i, x in row_numbers.items():
            group.add_number(i, x)
        if group.correlation is not None:
            group.correlation.update(row_numbers)

    def results(self, numeric_indexes, limit=MAX_GROUPS):
        """Finalized groups: largest first, then by key, capped to limit"""
        ordered = sorted(self.groups.items(), key=lambda kv: (-kv[1].size, kv[0]))
        out = []
        for key, group in ordered[:limit]:
            result = GroupResult(key=key, size=group.size)
            for i in numeric_indexes:
                summary = group.summary(i)
                if summary is not None:
                    result.metrics[self.column_names[i]] = summary
            if group.correlation is not None:
                result.corr_pairs = group.correlation.top_pairs(numeric_indexes, self.column_names)
            out.append(result)
        return out
