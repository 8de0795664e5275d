import logging

from ..errors import EmptyHeaderError
from ..models import Report
from .correlation_analyzer import PairwiseCorrelation
from .data_type_analyzer import ColumnAccumulator
from .group_analyzer import GroupByAggregator


class TableAnalyzer:
    """Single-pass analysis of a header plus data rows into a Report.

    Each call to analyze() builds fresh accumulators, so one instance can be
    reused for several files.
    """

    def __init__(self, options):
        self.options = options

    def analyze(self, rows, name):
        """Consume an iterable of rows (header first) and return a Report"""
        options = self.options
        rows = iter(rows)
        header = next(rows, None)
        if not header:
            raise EmptyHeaderError(name)

        columns = [ColumnAccumulator(h.strip(), options) for h in header]
        names = [c.name for c in columns]
        ncol = len(columns)

        grouper = GroupByAggregator(options.group_by, names, options.corr_per_group)
        correlation = PairwiseCorrelation() if options.correlations else None

        report = Report(name=name)
        row_limit = options.row_limit
        sample_limit = options.sample_limit

        for row in rows:
            report.rows += 1
            if row_limit is not None and report.processed >= row_limit:
                # keep reading so the total row count stays exact
                continue
            report.processed += 1

            if len(row) < ncol:
                row = list(row) + [""] * (ncol - len(row))
            elif len(row) > ncol:
                row = row[:ncol]

            if len(report.samples) < sample_limit:
                report.samples.append(list(row))

            row_numbers = {}
            for j, column in enumerate(columns):
                x = column.observe(row[j])
                if x is not None:
                    row_numbers[j] = x

            if correlation is not None:
                correlation.update(row_numbers)
            if grouper.enabled:
                key = grouper.group_key(row)
                if key is not None:
                    grouper.add_row(key, row_numbers)

        report.columns = [c.finalize() for c in columns]
        numeric = [i for i, col in enumerate(report.columns) if col.kind == "numeric"]

        if report.processed < report.rows:
            note = f"processed only {report.processed}/{report.rows} rows due to MaxRows"
            logging.warning(f"{name}: {note}")
            report.warnings.append(note)

        if grouper.groups:
            report.groups = grouper.results(numeric)

        if correlation is not None and len(numeric) >= 2:
            report.correlations = correlation.matrix(numeric, names)

        logging.info(f"Analyzed {name}: {report.processed} rows, {ncol} columns, {len(numeric)} numeric")
        return report
