"""
Analytics for reviewers: submission compliance, frequent absentees and the
weekly and monthly attendance summaries, each as JSON with CSV/PDF downloads.
"""

from datetime import date, datetime

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required
from decorators import reviewer_required
from services.cache import get_cached
from services.compliance import load_compliance
from services.absentees import absentee_report, filter_records
from services.summaries import load_weekly_summary, load_monthly_summary
from services.settings import get_settings
from utils import csv_export, pdf_export
from utils.dates import resolve_range, parse_date, start_of_week, RANGES, RANGE_WEEK
from utils.forms import arg_flag, arg_int

bp = Blueprint('analytics', __name__)


class BadArgument(ValueError):
    pass


def _range_arg(default=RANGE_WEEK):
    """(range_name, start, end) from ?range=week|month|term."""
    range_name = (request.args.get('range') or default).lower()
    if range_name not in RANGES:
        raise BadArgument(f"range must be one of: {', '.join(RANGES)}")
    settings = get_settings()
    start, end = resolve_range(
        range_name,
        today=date.today(),
        term_start=settings.term_start_date,
        term_length_days=current_app.config.get('TERM_LENGTH_DAYS', 90),
    )
    return range_name, start, end


def _week_arg():
    try:
        day = parse_date(request.args.get('week'), default=date.today())
    except ValueError:
        raise BadArgument('week must use the YYYY-MM-DD format')
    return start_of_week(day)


def _month_arg():
    value = (request.args.get('month') or '').strip()
    if not value:
        return date.today().replace(day=1)
    try:
        return datetime.strptime(value, '%Y-%m').date()
    except ValueError:
        raise BadArgument('month must use the YYYY-MM format')


def _compliance(start, end):
    today = date.today()
    return get_cached(
        f"compliance:{start}:{end}:{today}",
        lambda: load_compliance(start, end, today=today),
        force_refresh=arg_flag('refresh'),
    )


def _absentees(start, end, threshold):
    return get_cached(
        f"absentees:{start}:{end}:{threshold}",
        lambda: absentee_report(start, end, threshold),
        force_refresh=arg_flag('refresh'),
    )


def _weekly(week_start):
    return get_cached(
        f"summary:week:{week_start}",
        lambda: load_weekly_summary(week_start),
        force_refresh=arg_flag('refresh'),
    )


def _monthly(month_day):
    return get_cached(
        f"summary:month:{month_day:%Y-%m}",
        lambda: load_monthly_summary(month_day),
        force_refresh=arg_flag('refresh'),
    )


def _threshold():
    return arg_int('threshold', current_app.config.get('ABSENTEE_ALERT_THRESHOLD', 2), minimum=1)


def _pdf(html_content, filename):
    try:
        pdf_bytes = pdf_export.html_to_pdf(html_content)
    except pdf_export.PDFExportError as e:
        current_app.logger.error(f'Error generating {filename}: {e}')
        return jsonify({'success': False, 'message': 'PDF generation is unavailable.'}), 500
    return pdf_export.pdf_response(pdf_bytes, filename)


@bp.errorhandler(BadArgument)
def bad_argument(error):
    return jsonify({'success': False, 'message': str(error)}), 400


@bp.route('/compliance')
@login_required
@reviewer_required
def compliance():
    range_name, start, end = _range_arg()
    data = _compliance(start, end)
    return jsonify({'success': True, 'range': range_name, **data})


@bp.route('/compliance.csv')
@login_required
@reviewer_required
def compliance_csv():
    range_name, start, end = _range_arg()
    data = _compliance(start, end)
    filename = f"compliance_report_{date.today().isoformat()}.csv"
    return csv_export.csv_response(csv_export.compliance_csv(data, range_name), filename)


@bp.route('/absentees')
@login_required
@reviewer_required
def absentees():
    """Absence records (optionally narrowed by ?q=) and threshold alerts."""
    range_name, start, end = _range_arg()
    data = _absentees(start, end, _threshold())
    records = filter_records(data['records'], (request.args.get('q') or '').strip())
    return jsonify({
        'success': True,
        'range': range_name,
        'start_date': data['start_date'],
        'end_date': data['end_date'],
        'threshold': data['threshold'],
        'records': records,
        'alerts': data['alerts'],
        'critical_count': sum(1 for a in data['alerts'] if a['alert_level'] == 'critical'),
        'warning_count': sum(1 for a in data['alerts'] if a['alert_level'] == 'warning'),
    })


@bp.route('/absentees.csv')
@login_required
@reviewer_required
def absentees_csv():
    range_name, start, end = _range_arg()
    data = _absentees(start, end, _threshold())
    filename = f"absentee_report_{date.today().isoformat()}.csv"
    return csv_export.csv_response(csv_export.absentees_csv(data, range_name), filename)


@bp.route('/weekly-summary')
@login_required
@reviewer_required
def weekly_summary():
    return jsonify({'success': True, 'summary': _weekly(_week_arg())})


@bp.route('/weekly-summary.csv')
@login_required
@reviewer_required
def weekly_summary_csv():
    summary = _weekly(_week_arg())
    filename = f"weekly_summary_{summary['start_date']}_to_{summary['end_date']}.csv"
    return csv_export.csv_response(csv_export.weekly_summary_csv(summary), filename)


@bp.route('/weekly-summary.pdf')
@login_required
@reviewer_required
def weekly_summary_pdf():
    summary = _weekly(_week_arg())
    html_content = pdf_export.render_weekly_html(summary, get_settings().school_name)
    return _pdf(html_content, f"weekly_summary_{summary['start_date']}.pdf")


@bp.route('/monthly-summary')
@login_required
@reviewer_required
def monthly_summary():
    return jsonify({'success': True, 'summary': _monthly(_month_arg())})


@bp.route('/monthly-summary.csv')
@login_required
@reviewer_required
def monthly_summary_csv():
    summary = _monthly(_month_arg())
    return csv_export.csv_response(csv_export.monthly_summary_csv(summary),
                                   f"monthly-summary-{summary['month']}.csv")


@bp.route('/monthly-summary.pdf')
@login_required
@reviewer_required
def monthly_summary_pdf():
    summary = _monthly(_month_arg())
    html_content = pdf_export.render_monthly_html(summary, get_settings().school_name)
    return _pdf(html_content, f"monthly-summary-{summary['month']}.pdf")
