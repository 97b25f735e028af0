"""
Frequent-absentee tracking built from the free-text absentee field on daily
reports.
"""

import logging
import re

from models import DailyReport

logger = logging.getLogger(__name__)

NAME_SEPARATORS = re.compile(r'[,;\n]+')
ALERT_WARNING = 'warning'
ALERT_CRITICAL = 'critical'
UNKNOWN_CLASS = 'Unknown'


def normalize_name(raw):
    """Collapse whitespace and capitalise the first letter of each word."""
    words = raw.strip().lower().split()
    return ' '.join(word[:1].upper() + word[1:] for word in words)


def parse_absentee_names(text):
    """Split the absentee field on commas, semicolons and newlines."""
    if not text:
        return []
    names = []
    for piece in NAME_SEPARATORS.split(text):
        name = normalize_name(piece)
        if name:
            names.append(name)
    return names


def aggregate_absentees(rows):
    """
    Count absences per normalised name.

    Args:
        rows: iterable of dicts with report_date (ISO string), absentees text
            and class_name (None when the class is unknown).

    Returns:
        list of records, most absences first.
    """
    records = {}
    for row in rows:
        names = parse_absentee_names(row.get('absentees'))
        if not names:
            continue
        report_date = row['report_date']
        class_name = row.get('class_name') or UNKNOWN_CLASS
        for name in names:
            record = records.get(name)
            if record is None:
                record = {
                    'student_name': name,
                    'absence_count': 0,
                    'last_absence': report_date,
                    'classes': [],
                    'dates': [],
                }
                records[name] = record
            record['absence_count'] += 1
            record['dates'].append(report_date)
            if report_date > record['last_absence']:
                record['last_absence'] = report_date
            if class_name not in record['classes']:
                record['classes'].append(class_name)

    result = list(records.values())
    for record in result:
        record['dates'].sort()
    result.sort(key=lambda r: r['absence_count'], reverse=True)
    return result


def build_alerts(records, threshold):
    """Learners at or above threshold; critical at twice the threshold."""
    if threshold < 1:
        raise ValueError("Alert threshold must be at least 1")
    alerts = []
    for record in records:
        count = record['absence_count']
        if count < threshold:
            continue
        alerts.append({
            'student_name': record['student_name'],
            'absence_count': count,
            'class_name': record['classes'][0] if record['classes'] else UNKNOWN_CLASS,
            'alert_level': ALERT_CRITICAL if count >= threshold * 2 else ALERT_WARNING,
            'dates': record['dates'],
        })
    return alerts


def filter_records(records, query):
    if not query:
        return records
    needle = query.lower()
    return [r for r in records if needle in r['student_name'].lower()]


def load_absentee_rows(start, end):
    reports = DailyReport.query.filter(
        DailyReport.report_date >= start,
        DailyReport.report_date <= end,
        DailyReport.absentees.isnot(None),
        DailyReport.absentees != ''
    ).order_by(DailyReport.report_date).all()
    return [{
        'report_date': r.report_date.isoformat(),
        'absentees': r.absentees,
        'class_name': r.class_info.display_name if r.class_info else None,
    } for r in reports]


def absentee_report(start, end, threshold):
    """Records and alerts for the reports in [start, end]."""
    rows = load_absentee_rows(start, end)
    records = aggregate_absentees(rows)
    logger.debug("Absentees %s..%s: %d reports, %d learners", start, end, len(rows), len(records))
    return {
        'start_date': start.isoformat(),
        'end_date': end.isoformat(),
        'threshold': threshold,
        'records': records,
        'alerts': build_alerts(records, threshold),
    }
