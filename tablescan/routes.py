import os
import logging
import uuid
from flask import request, jsonify, send_file, current_app
from werkzeug.utils import secure_filename

from .analysis_exporter import analyze_file, is_spreadsheet, render_summary
from .config import options_from_form
from .errors import (AnalysisError, ContainerError, EmptyHeaderError, FileReadError, OptionsError,
                     RowReadError, SheetNotFoundError, SummaryTooLargeError)
from .utils.export_utils import ExportUtils

ALLOWED_EXTENSIONS = {'csv', 'tsv', 'tab', 'txt', 'xlsx', 'xlsm'}

# failures caused by the uploaded file or the submitted options
CLIENT_ERRORS = (OptionsError, EmptyHeaderError, RowReadError, ContainerError, FileReadError)


def allowed_file(filename):
    """Check if file extension is allowed"""
    return '.' in filename and \
           filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def error_response(message, status, **extra):
    body = {'status': 'error', 'message': message}
    body.update(extra)
    return jsonify(body), status


def _save_upload():
    """Store the uploaded file under a unique name; returns (path, original name) or None"""
    file = request.files.get('file')
    if not file or not file.filename or not allowed_file(file.filename):
        return None
    filename = secure_filename(file.filename)
    file_path = os.path.join(current_app.config['UPLOAD_FOLDER'], f"{uuid.uuid4().hex}_{filename}")
    file.save(file_path)
    return file_path, filename


def _analyze_upload(file_path, filename):
    """Analyze a stored upload and return (report, markdown)"""
    options, sheet_name, sheet_index = options_from_form(request.form)
    report = analyze_file(file_path, options, sheet_name, sheet_index)
    report.name = filename
    spreadsheet = is_spreadsheet(file_path)
    if spreadsheet and sheet_name:
        report.name = f"{filename} (sheet: {sheet_name})"
    markdown = render_summary(report, spreadsheet, current_app.config['MAX_SUMMARY_CHARS'])
    return report, markdown


def _handle_analysis_error(e):
    if isinstance(e, SheetNotFoundError):
        return error_response(str(e), 404, available_sheets=e.available_sheets)
    if isinstance(e, SummaryTooLargeError):
        return error_response(str(e), 413)
    if isinstance(e, CLIENT_ERRORS):
        return error_response(str(e), 400)
    return error_response(f'Analysis failed: {str(e)}', 500)


def register_routes(app):
    """Register all routes with the Flask app"""

    @app.route('/api/analyze', methods=['POST'])
    def api_analyze():
        """API endpoint to analyze one uploaded table"""
        saved = _save_upload()
        if saved is None:
            return error_response('No valid file uploaded', 400)
        file_path, filename = saved

        try:
            logging.info(f"Analyzing upload: {filename}")
            report, markdown = _analyze_upload(file_path, filename)
            return jsonify({
                'status': 'success',
                'report': report.to_dict(),
                'markdown': markdown,
            })
        except AnalysisError as e:
            logging.error(f"Analysis error: {str(e)}")
            return _handle_analysis_error(e)
        except Exception as e:
            logging.exception(f"Unexpected error while processing {filename}")
            return error_response(f"Analysis failed: {str(e)}", 500)
        finally:
            os.remove(file_path)

    @app.route('/api/export/<format>', methods=['POST'])
    def api_export_results(format):
        """API endpoint to analyze an upload and download the result"""
        if format.lower() not in ExportUtils.FORMATS:
            return error_response(f'Unsupported export format: {format}', 400)
        saved = _save_upload()
        if saved is None:
            return error_response('No valid file uploaded', 400)
        file_path, filename = saved

        try:
            report, _ = _analyze_upload(file_path, filename)
            export_utils = ExportUtils(current_app.config['EXPORT_FOLDER'])
            export_path = export_utils.export(report, format, filename)
            return send_file(os.path.abspath(export_path), as_attachment=True)
        except AnalysisError as e:
            logging.error(f"Export error: {str(e)}")
            return _handle_analysis_error(e)
        except Exception as e:
            logging.exception(f"Unexpected error while processing {filename}")
            return error_response(f"Analysis failed: {str(e)}", 500)
        finally:
            os.remove(file_path)
