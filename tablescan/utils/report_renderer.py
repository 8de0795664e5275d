"""Text rendering of a Report.

The section headers are fixed; downstream prompt builders look for them
verbatim. A section is emitted only when it has content.
"""
from .formatting import safe_name, safe_value, truncate

MAX_GROUP_METRICS = 6
MAX_GROUP_PAIRS = 8
MAX_GLOBAL_PAIRS = 10


def _g(x):
    return f"{x:.4g}"


def render_report(report):
    """Render the report as Markdown-like text"""
    lines = []
    lines.extend(_dataset_section(report))
    lines.extend(_schema_section(report))
    lines.extend(_groups_section(report))
    lines.extend(_group_correlations_section(report))
    lines.extend(_correlations_section(report))
    lines.extend(_samples_section(report))
    lines.extend(_notes_section(report))
    return "\n".join(lines) + "\n"


def _dataset_section(report):
    lines = ["[DATASET SUMMARY]"]
    if report.name:
        lines.append(f"File: {report.name}")
    if report.rows > 0:
        if report.processed < report.rows:
            lines.append(f"Rows: ~{report.rows} (processed {report.processed})")
        else:
            lines.append(f"Rows: {report.rows}")
    lines.append(f"Columns: {len(report.columns)}")
    return lines


def _column_detail(col):
    if col.kind == "numeric":
        detail = f" — min {_g(col.min)}, max {_g(col.max)}, mean {_g(col.mean)}, std {_g(col.std)}"
        if col.outlier_threshold > 0:
            detail += f"; outliers: {col.outliers_count} above |z|>{col.outlier_threshold:.1f}"
            if col.outliers_max_abs_z > 0:
                detail += f" (max |z|≈{col.outliers_max_abs_z:.2f})"
        return detail
    if col.kind == "categorical" and col.top_values:
        tops = ", ".join(f"{safe_value(tv.value)}({tv.count})" for tv in col.top_values)
        detail = f" — top: {tops}"
        if col.unique > len(col.top_values):
            detail += f"; unique={col.unique}"
        return detail
    if col.kind == "text" and col.example_texts:
        examples = " | ".join(safe_value(truncate(t)) for t in col.example_texts)
        return f" — e.g., {examples}"
    return ""


def _schema_section(report):
    if not report.columns:
        return []
    lines = ["", "[SCHEMA]"]
    for col in report.columns:
        label = safe_name(col.name)
        if col.unit:
            label += f" [{col.unit}]"
        lines.append(
            f"- {label}: {col.kind} (non-null {col.non_null}, missing {col.missing_pct:.1f}%)"
            + _column_detail(col)
        )
    return lines


def _groups_section(report):
    if not report.groups:
        return []
    lines = ["", "[GROUP-BY SUMMARY]"]
    for group in report.groups:
        lines.append(f"- {group.key} (n={group.size})")
        for name in sorted(group.metrics)[:MAX_GROUP_METRICS]:
            m = group.metrics[name]
            lines.append(f"  • {safe_name(name)}: mean {_g(m.mean)} (min {_g(m.min)}, max {_g(m.max)})")
    return lines


def _group_correlations_section(report):
    groups = [g for g in report.groups if g.corr_pairs]
    if not groups:
        return []
    lines = ["", "[PER-GROUP CORRELATIONS]"]
    for group in groups:
        lines.append(f"- {group.key}:")
        for pair in group.corr_pairs[:MAX_GROUP_PAIRS]:
            lines.append(f"  • {safe_name(pair.a)} ~ {safe_name(pair.b)}: r={pair.r:.3f}")
    return lines


def _correlations_section(report):
    pairs = report.top_correlations(MAX_GLOBAL_PAIRS)
    if not pairs:
        return []
    lines = ["", "[CORRELATIONS]"]
    for pair in pairs:
        lines.append(f"- {safe_name(pair.a)} ~ {safe_name(pair.b)}: r={pair.r:.3f}")
    return lines


def _table_row(cells):
    return "| " + " | ".join(cells) + " |"


def _samples_section(report):
    if not report.samples or not report.columns:
        return []
    header = [safe_value(safe_name(col.name)) for col in report.columns]
    lines = ["", "[HEAD AND SAMPLE ROWS]", _table_row(header), _table_row(["---"] * len(header))]
    for row in report.samples:
        lines.append(_table_row([safe_value(truncate(cell)) for cell in row]))
    return lines


def _notes_section(report):
    if not report.warnings:
        return []
    return ["", "[NOTES]"] + [f"- {w}" for w in report.warnings]
