import json
import logging
import math
import os
from datetime import datetime

from .report_renderer import render_report


class ExportUtils:
    """Utility class for exporting analysis reports in various formats"""

    FORMATS = ("json", "csv", "txt", "md")

    def __init__(self, export_dir="exports"):
        self.export_dir = export_dir
        os.makedirs(self.export_dir, exist_ok=True)

    def export(self, report, format_type, name=None):
        """Export a report in the specified format and return the written path"""
        format_type = format_type.lower()
        if format_type not in self.FORMATS:
            raise ValueError(f"Unsupported export format: {format_type}")

        stem = os.path.splitext(name or report.name)[0] or "report"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = os.path.join(self.export_dir, f"{stem}_{timestamp}.{format_type}")

        if format_type == "json":
            self._export_json(report, filepath)
        elif format_type == "csv":
            self._export_csv(report, filepath)
        else:
            self._export_text(report, filepath)

        logging.info(f"Exported {report.name} as {format_type}: {filepath}")
        return filepath

    def _export_json(self, report, filepath):
        """Export the report as JSON"""
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self._make_json_serializable(report.to_dict()), f, indent=2, ensure_ascii=False)

    def _export_csv(self, report, filepath):
        """Export the schema table as CSV"""
        report.schema_frame().to_csv(filepath, index=False, encoding="utf-8")

    def _export_text(self, report, filepath):
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(render_report(report))

    def _make_json_serializable(self, obj):
        """Replace non-finite floats with None so the output stays valid JSON"""
        if isinstance(obj, dict):
            return {key: self._make_json_serializable(value) for key, value in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [self._make_json_serializable(item) for item in obj]
        elif isinstance(obj, float) and not math.isfinite(obj):
            return None
        return obj
