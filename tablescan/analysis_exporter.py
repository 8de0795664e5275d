import json
import logging
import os

from .analyzers.table_analyzer import TableAnalyzer
from .errors import SummaryTooLargeError
from .models import default_options
from .parsers.file_parser import FileParserFactory
from .utils.report_renderer import render_report

MAX_SUMMARY_CHARS = 100000

SPREADSHEET_HINTS = [
    "Lower max_rows to limit rows analyzed (e.g., max_rows=10000)",
    "Analyze a specific sheet with sheet_name if the workbook has several",
    "Pre-filter the data to include only relevant rows/columns",
]
DELIMITED_HINTS = [
    "Lower max_rows to limit rows analyzed (e.g., max_rows=10000)",
    "Pre-filter the data to include only relevant rows/columns",
]


def is_spreadsheet(file_path):
    ext = os.path.splitext(file_path)[1].lower().lstrip(".")
    return ext in FileParserFactory.SPREADSHEET_TYPES


def analyze_file(file_path, options=None, sheet_name="", sheet_index=1):
    """Analyze a delimited-text or spreadsheet file into a Report"""
    options = options or default_options()
    parser = FileParserFactory().get_parser_for_path(file_path, options, sheet_name, sheet_index)
    logging.info(f"Analyzing file: {os.path.basename(file_path)}")
    return TableAnalyzer(options).analyze(parser.iter_rows(file_path), os.path.basename(file_path))


def analyze_csv(file_path, options=None):
    options = options or default_options()
    parser = FileParserFactory().get_parser("csv", options)
    return TableAnalyzer(options).analyze(parser.iter_rows(file_path), os.path.basename(file_path))


def analyze_xlsx(file_path, options=None, sheet_name="", sheet_index=1):
    options = options or default_options()
    parser = FileParserFactory().get_parser("xlsx", options, sheet_name, sheet_index)
    return TableAnalyzer(options).analyze(parser.iter_rows(file_path), os.path.basename(file_path))


def render_summary(report, spreadsheet=False, max_chars=MAX_SUMMARY_CHARS):
    """Rendered report text, refused when longer than max_chars"""
    text = render_report(report)
    if max_chars and len(text) > max_chars:
        hints = SPREADSHEET_HINTS if spreadsheet else DELIMITED_HINTS
        logging.error(f"Summary of {report.name} is {len(text)} characters (limit {max_chars})")
        raise SummaryTooLargeError(report, len(text), max_chars, hints)
    return text


def summarize_file(file_path, options=None, sheet_name="", sheet_index=1, max_chars=MAX_SUMMARY_CHARS):
    """Analyze one file and return its rendered summary"""
    spreadsheet = is_spreadsheet(file_path)
    if spreadsheet:
        report = analyze_xlsx(file_path, options, sheet_name, sheet_index)
        if sheet_name:
            report.name = f"{report.name} (sheet: {sheet_name})"
    else:
        report = analyze_csv(file_path, options)
    return render_summary(report, spreadsheet, max_chars)


def analyze_batch(file_paths, options=None, sheet_name="", sheet_index=1):
    """Analyze files one after another in sorted order; returns (path, report) pairs"""
    paths = sorted(set(file_paths))
    results = []
    for i, path in enumerate(paths, start=1):
        logging.info(f"[{i}/{len(paths)}] Processing {os.path.basename(path)}...")
        results.append((path, analyze_file(path, options, sheet_name, sheet_index)))
    return results


class AnalysisExporter:
    """Runs the analysis for a set of files and bundles the results"""

    def __init__(self, options=None, sheet_name="", sheet_index=1):
        self.options = options or default_options()
        self.sheet_name = sheet_name
        self.sheet_index = sheet_index

    def run_full_analysis(self, file_paths):
        """
        Analyze every file and return {file name: {"report", "markdown"}}
        """
        results = {}
        for path, report in analyze_batch(file_paths, self.options, self.sheet_name, self.sheet_index):
            results[os.path.basename(path)] = {
                "report": report.to_dict(),
                "markdown": render_report(report),
            }
        return results

    def export_to_json(self, file_paths, output_file="analysis_results.json"):
        """
        Run analysis and save results to a JSON file
        """
        results = self.run_full_analysis(file_paths)

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(results, f, indent=4, ensure_ascii=False)

        return output_file
