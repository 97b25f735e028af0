"""
PDF documents for daily reports and attendance summaries. Pages are rendered
from the Jinja templates under templates/pdf/ and converted by WeasyPrint.
"""

from datetime import datetime
from io import BytesIO

from flask import render_template, make_response

from services.summaries import attendance_band
from utils.dates import percentage


class PDFExportError(Exception):
    pass


def _common_context(school_name):
    return {
        'school_name': school_name,
        'generated_on': datetime.now().strftime('%B %d, %Y at %I:%M %p'),
    }


def render_report_html(report, school_name):
    """Daily class report, including head comments."""
    rate = percentage(report.present_learners, report.total_learners)
    return render_template(
        'pdf/daily_report.html',
        report=report,
        comments=report.comments,
        attendance_rate=rate,
        attendance_band=attendance_band(report.present_learners, report.total_learners),
        **_common_context(school_name)
    )


def render_weekly_html(summary, school_name):
    return render_template('pdf/weekly_summary.html', summary=summary, **_common_context(school_name))


def render_monthly_html(summary, school_name):
    return render_template('pdf/monthly_summary.html', summary=summary, **_common_context(school_name))


def html_to_pdf(html_content):
    """Convert rendered HTML to PDF bytes."""
    try:
        from weasyprint import HTML
    except ImportError as e:
        raise PDFExportError('WeasyPrint not installed') from e

    pdf_buffer = BytesIO()
    HTML(string=html_content).write_pdf(pdf_buffer)
    pdf_buffer.seek(0)
    return pdf_buffer.getvalue()


def pdf_response(pdf_bytes, filename):
    response = make_response(pdf_bytes)
    response.headers['Content-Type'] = 'application/pdf'
    response.headers['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
