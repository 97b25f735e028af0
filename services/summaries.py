"""
Attendance rollups over daily reports: weekly and monthly summaries plus the
headteacher and director dashboard figures.

The calculators take plain row dicts (see ``report_row``) so they can be
exercised without a database; the ``load_*`` helpers fetch and flatten.
"""

import logging
from datetime import timedelta

from models import db, Class, DailyReport, Incident, User, INCIDENT_SEVERITIES
from utils.dates import (
    start_of_week, end_of_week, start_of_month, end_of_month, weeks_in_month,
    display_day, display_month_day, percentage, round_half_up,
)

logger = logging.getLogger(__name__)

STATUS_NEEDS_ATTENTION = 'Needs Attention'
STATUS_NORMAL = 'Normal'

FILTER_ALL = 'all'
FILTER_ISSUES = 'issues'
FILTER_PENDING = 'pending'
DASHBOARD_FILTERS = (FILTER_ALL, FILTER_ISSUES, FILTER_PENDING)


def report_row(report):
    """Flatten a DailyReport into the dict shape the calculators read."""
    class_obj = report.class_info
    return {
        'id': report.id,
        'report_date': report.report_date,
        'class_id': report.class_id,
        'grade': class_obj.grade if class_obj else 'Unknown',
        'stream': class_obj.stream if class_obj else 'Unknown',
        'total_learners': report.total_learners,
        'present_learners': report.present_learners,
        'health_incident': bool(report.health_incident),
        'discipline_issue': bool(report.discipline_issue),
        'parent_communication': bool(report.parent_communication),
        'lessons_covered': bool(report.lessons_covered),
    }


def report_attendance_rate(row):
    """Unrounded attendance percentage for one report."""
    if not row['total_learners']:
        return 0.0
    return row['present_learners'] / row['total_learners'] * 100


def attendance_band(present, total):
    rate = (present / total * 100) if total else 0
    if rate >= 90:
        return 'good'
    if rate >= 75:
        return 'fair'
    return 'poor'


def report_status(row):
    if row['health_incident'] or row['discipline_issue'] or row['parent_communication']:
        return STATUS_NEEDS_ATTENTION
    return STATUS_NORMAL


def _class_name(row):
    return f"{row['grade']} - {row['stream']}"


def _has_incident(row):
    return row['health_incident'] or row['discipline_issue']


def _daily_totals(rows):
    """Per-date learner totals in first-seen (date) order."""
    days = {}
    for row in rows:
        day = days.setdefault(row['report_date'], {
            'date': row['report_date'],
            'total_students': 0,
            'present_students': 0,
            'reports_count': 0,
        })
        day['total_students'] += row['total_learners']
        day['present_students'] += row['present_learners']
        day['reports_count'] += 1
    return list(days.values())


def weekly_summary(rows, week_start):
    """
    Summarise one Monday-Sunday week.

    ``rows`` must be sorted by report_date ascending, which is the order the
    daily breakdown is reported in.
    """
    week_start = start_of_week(week_start)
    week_end = end_of_week(week_start)

    daily_breakdown = []
    for day in _daily_totals(rows):
        daily_breakdown.append({
            'date': day['date'].isoformat(),
            'display_date': display_day(day['date']),
            'total_students': day['total_students'],
            'present_students': day['present_students'],
            'absent_students': day['total_students'] - day['present_students'],
            'attendance_rate': percentage(day['present_students'], day['total_students']),
            'reports_count': day['reports_count'],
        })

    classes = {}
    for row in rows:
        key = (row['grade'], row['stream'])
        summary = classes.setdefault(key, {
            'class_name': _class_name(row),
            'grade': row['grade'],
            'stream': row['stream'],
            'reports_submitted': 0,
            'rate_total': 0.0,
            'health_issues': 0,
            'discipline_issues': 0,
        })
        summary['reports_submitted'] += 1
        summary['rate_total'] += report_attendance_rate(row)
        if row['health_incident']:
            summary['health_issues'] += 1
        if row['discipline_issue']:
            summary['discipline_issues'] += 1

    class_summaries = []
    for summary in classes.values():
        rate_total = summary.pop('rate_total')
        count = summary['reports_submitted']
        summary['avg_attendance'] = round_half_up(rate_total / count) if count else 0
        class_summaries.append(summary)
    class_summaries.sort(key=lambda c: c['class_name'])

    total_students = sum(r['total_learners'] for r in rows)
    total_present = sum(r['present_learners'] for r in rows)
    reported_days = len(daily_breakdown) or 1

    return {
        'start_date': week_start.isoformat(),
        'end_date': week_end.isoformat(),
        'total_reports': len(rows),
        'total_students': round_half_up(total_students / reported_days),
        'avg_attendance': percentage(total_present, total_students),
        'total_present': total_present,
        'total_absent': total_students - total_present,
        'health_incidents': sum(1 for r in rows if r['health_incident']),
        'discipline_incidents': sum(1 for r in rows if r['discipline_issue']),
        'parent_communications': sum(1 for r in rows if r['parent_communication']),
        'class_summaries': class_summaries,
        'daily_breakdown': daily_breakdown,
    }


def monthly_summary(rows, incident_severities, month_day):
    """
    Summarise the calendar month containing ``month_day``.

    Args:
        rows: report rows inside the month.
        incident_severities: severities of the Incident rows dated in the month.
        month_day: any date in the month.
    """
    month_start = start_of_month(month_day)
    month_end = end_of_month(month_day)

    total_students = sum(r['total_learners'] for r in rows)
    total_present = sum(r['present_learners'] for r in rows)
    stats = {
        'total_reports': len(rows),
        'total_students': total_students,
        'total_present': total_present,
        'avg_attendance_rate': percentage(total_present, total_students),
        'health_incidents': sum(1 for r in rows if r['health_incident']),
        'discipline_incidents': sum(1 for r in rows if r['discipline_issue']),
        'critical_incidents': sum(1 for s in incident_severities if s in INCIDENT_SEVERITIES),
        'lessons_not_covered': sum(1 for r in rows if not r['lessons_covered']),
    }

    weekly_breakdown = []
    for week_start in weeks_in_month(month_day):
        week_end = end_of_week(week_start)
        week_rows = [r for r in rows if week_start <= r['report_date'] <= week_end]
        week_total = sum(r['total_learners'] for r in week_rows)
        week_present = sum(r['present_learners'] for r in week_rows)
        weekly_breakdown.append({
            'week_start': display_month_day(week_start),
            'week_end': display_month_day(week_end),
            'reports': len(week_rows),
            'avg_attendance': percentage(week_present, week_total),
            'incidents': sum(1 for r in week_rows if _has_incident(r)),
        })

    classes = {}
    for row in rows:
        classes.setdefault((row['grade'], row['stream']), []).append(row)

    class_performance = []
    for (grade, stream), class_rows in classes.items():
        class_total = sum(r['total_learners'] for r in class_rows)
        class_present = sum(r['present_learners'] for r in class_rows)
        class_performance.append({
            'class_name': f"{grade} - {stream}",
            'grade': grade,
            'stream': stream,
            'total_reports': len(class_rows),
            'avg_attendance': percentage(class_present, class_total),
            'incidents': sum(1 for r in class_rows if _has_incident(r)),
        })
    class_performance.sort(key=lambda c: c['avg_attendance'], reverse=True)

    return {
        'month': month_start.strftime('%Y-%m'),
        'month_label': month_start.strftime('%B %Y'),
        'start_date': month_start.isoformat(),
        'end_date': month_end.isoformat(),
        'stats': stats,
        'weekly_breakdown': weekly_breakdown,
        'class_performance': class_performance,
    }


def daily_stats(rows, total_classes):
    """Headteacher figures for the reports of a single day."""
    total_students = sum(r['total_learners'] for r in rows)
    present_students = sum(r['present_learners'] for r in rows)
    return {
        'total_reports': len(rows),
        'total_students': total_students,
        'present_students': present_students,
        'absent_students': total_students - present_students,
        'health_issues': sum(1 for r in rows if r['health_incident']),
        'discipline_issues': sum(1 for r in rows if r['discipline_issue']),
        'classes_reported': len(rows),
        'total_classes': total_classes,
        'attendance_percentage': percentage(present_students, total_students),
    }


def filter_dashboard_reports(reports, status):
    """
    Narrow dashboard reports: 'issues' keeps health/discipline flags,
    'pending' keeps reports with no head comments yet.
    """
    if status == FILTER_ISSUES:
        return [r for r in reports if r['health_incident'] or r['discipline_issue']]
    if status == FILTER_PENDING:
        return [r for r in reports if not r.get('comments')]
    return list(reports)


def director_stats(rows, total_teachers, total_classes):
    """Daily totals, per-class running averages and overall attendance for a range."""
    daily = [{
        'date': d['date'].isoformat(),
        'total_students': d['total_students'],
        'present_students': d['present_students'],
        'reports_count': d['reports_count'],
    } for d in _daily_totals(rows)]
    daily.sort(key=lambda d: d['date'])

    classes = {}
    for row in rows:
        stats = classes.setdefault((row['grade'], row['stream']), {
            'grade': row['grade'],
            'stream': row['stream'],
            'total_reports': 0,
            'avg_attendance': 0.0,
            'health_issues': 0,
            'discipline_issues': 0,
        })
        stats['total_reports'] += 1
        n = stats['total_reports']
        stats['avg_attendance'] = (stats['avg_attendance'] * (n - 1) + report_attendance_rate(row)) / n
        if row['health_incident']:
            stats['health_issues'] += 1
        if row['discipline_issue']:
            stats['discipline_issues'] += 1

    class_stats = sorted(classes.values(), key=lambda c: c['grade'])
    for stats in class_stats:
        stats['avg_attendance'] = round(stats['avg_attendance'], 1)

    total_students = sum(r['total_learners'] for r in rows)
    present_students = sum(r['present_learners'] for r in rows)
    return {
        'daily': daily,
        'class_stats': class_stats,
        'overall': {
            'total_teachers': total_teachers,
            'total_classes': total_classes,
            'avg_attendance': percentage(present_students, total_students),
            'total_reports': len(rows),
        },
    }


def _reports_between(start, end):
    return DailyReport.query.filter(
        DailyReport.report_date >= start,
        DailyReport.report_date <= end
    ).order_by(DailyReport.report_date.asc(), DailyReport.id.asc()).all()


def load_weekly_summary(week_start):
    week_start = start_of_week(week_start)
    rows = [report_row(r) for r in _reports_between(week_start, end_of_week(week_start))]
    return weekly_summary(rows, week_start)


def load_monthly_summary(month_day):
    month_start = start_of_month(month_day)
    month_end = end_of_month(month_day)
    rows = [report_row(r) for r in _reports_between(month_start, month_end)]
    severities = [s for (s,) in db.session.query(Incident.severity).filter(
        Incident.incident_date >= month_start,
        Incident.incident_date <= month_end
    ).all()]
    return monthly_summary(rows, severities, month_day)


def active_class_count():
    return Class.query.filter_by(active=True).count()


def load_director_stats(start, end):
    rows = [report_row(r) for r in _reports_between(start, end)]
    total_teachers = User.query.filter_by(role='teacher').count()
    result = director_stats(rows, total_teachers, active_class_count())
    result['start_date'] = start.isoformat()
    result['end_date'] = end.isoformat()
    return result


def default_director_range(today, days):
    return today - timedelta(days=days), today
