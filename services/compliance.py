"""
Report submission compliance: expected school-day reports versus the reports
actually submitted, per class and per day.
"""

import logging
from datetime import date

from models import Class, DailyReport
from utils.dates import school_days, display_day, percentage

logger = logging.getLogger(__name__)

UNASSIGNED = 'Unassigned'


def class_rows(classes):
    """Flatten active Class models into the plain rows the calculator uses."""
    rows = []
    for class_obj in classes:
        teacher = class_obj.teacher
        rows.append({
            'id': class_obj.id,
            'grade': class_obj.grade,
            'stream': class_obj.stream,
            'teacher_id': teacher.id if teacher else None,
            'teacher_name': teacher.full_name if teacher else None,
        })
    return rows


def calculate_compliance(classes, submissions, start, end, today=None):
    """
    Match expected reports (every active class on every school day) against
    submitted ones.

    Args:
        classes: list of dicts with id, grade, stream, teacher_id, teacher_name.
        submissions: iterable of (class_id, report_date) pairs.
        start, end: date range; end is clipped to today.
        today: reference date, defaults to date.today().

    Returns:
        dict with 'classes' (lowest rate first), 'daily' (most recent first)
        and 'overall'.
    """
    today = today or date.today()
    if end > today:
        end = today

    days = school_days(start, end)
    submitted = {(class_id, report_date) for class_id, report_date in submissions}

    class_data = []
    for cls in classes:
        missing_dates = []
        count = 0
        for day in days:
            if (cls['id'], day) in submitted:
                count += 1
            else:
                missing_dates.append(day.isoformat())

        class_data.append({
            'class_id': cls['id'],
            'grade': cls['grade'],
            'stream': cls['stream'],
            'class_name': f"{cls['grade']} - {cls['stream']}",
            'teacher_name': cls.get('teacher_name') or UNASSIGNED,
            'teacher_id': cls.get('teacher_id'),
            'total_expected': len(days),
            'total_submitted': count,
            'compliance_rate': percentage(count, len(days)),
            'missing_dates': missing_dates,
        })
    class_data.sort(key=lambda c: c['compliance_rate'])

    total_classes = len(classes)
    daily = []
    for day in days:
        count = sum(1 for cls in classes if (cls['id'], day) in submitted)
        daily.append({
            'date': day.isoformat(),
            'display_date': display_day(day),
            'total_classes': total_classes,
            'submitted': count,
            'missing': total_classes - count,
            'compliance_rate': percentage(count, total_classes),
        })
    daily.reverse()

    total_expected = total_classes * len(days)
    total_submitted = sum(c['total_submitted'] for c in class_data)

    return {
        'start_date': start.isoformat(),
        'end_date': end.isoformat(),
        'school_days': len(days),
        'classes': class_data,
        'daily': daily,
        'overall': {
            'total_expected': total_expected,
            'total_submitted': total_submitted,
            'compliance_rate': percentage(total_submitted, total_expected),
            'perfect_classes': sum(1 for c in class_data if c['compliance_rate'] == 100),
            'missing_classes': sum(1 for c in class_data if c['compliance_rate'] < 100),
        },
    }


def load_compliance(start, end, today=None):
    """Fetch active classes and the reports in range, then calculate."""
    classes = Class.query.filter_by(active=True).order_by(Class.grade, Class.stream).all()
    reports = DailyReport.query.with_entities(DailyReport.class_id, DailyReport.report_date).filter(
        DailyReport.report_date >= start,
        DailyReport.report_date <= end
    ).all()
    logger.debug("Compliance %s..%s: %d classes, %d reports", start, end, len(classes), len(reports))
    return calculate_compliance(class_rows(classes), reports, start, end, today=today)
