from .analysis_exporter import analyze_batch, analyze_csv, analyze_file, analyze_xlsx, summarize_file
from .errors import (AnalysisError, ContainerError, EmptyHeaderError, FileReadError, OptionsError,
                     RowReadError, SheetNotFoundError, SummaryTooLargeError)
from .models import ColumnSummary, GroupResult, Options, Report, default_options
from .utils.report_renderer import render_report

__version__ = "0.1.0"
