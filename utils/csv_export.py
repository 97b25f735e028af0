"""
CSV layouts for the analytics downloads.

Each builder takes the dict returned by the matching service and returns the
CSV text; routes wrap it with ``csv_response``.
"""

import csv
import io

from flask import Response

PERIOD_LABELS = {
    'week': 'This Week',
    'month': 'This Month',
    'term': 'This Term',
}


def _write(rows):
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerows(rows)
    return output.getvalue()


def csv_response(content, filename):
    return Response(
        content,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )


def compliance_csv(data, range_name):
    rows = [
        ['Report Submission Compliance'],
        [f"Period: {PERIOD_LABELS.get(range_name, range_name)}"],
        [f"Overall Compliance: {data['overall']['compliance_rate']}%"],
        [],
        ['CLASS COMPLIANCE'],
        ['Class', 'Teacher', 'Expected', 'Submitted', 'Rate', 'Missing Dates'],
    ]
    for c in data['classes']:
        rows.append([
            c['class_name'],
            c['teacher_name'],
            c['total_expected'],
            c['total_submitted'],
            f"{c['compliance_rate']}%",
            '; '.join(c['missing_dates']),
        ])

    rows.extend([[], ['DAILY COMPLIANCE'], ['Date', 'Total Classes', 'Submitted', 'Missing', 'Rate']])
    for d in data['daily']:
        rows.append([d['date'], d['total_classes'], d['submitted'], d['missing'], f"{d['compliance_rate']}%"])
    return _write(rows)


def absentees_csv(data, range_name):
    rows = [
        ['Frequent Absentee Report'],
        [f"Period: {PERIOD_LABELS.get(range_name, range_name)}"],
        [f"Threshold: {data['threshold']}+ absences"],
        [],
        ['Student Name', 'Absence Count', 'Last Absence', 'Classes', 'Dates'],
    ]
    for r in data['records']:
        rows.append([
            r['student_name'],
            r['absence_count'],
            r['last_absence'],
            '; '.join(r['classes']),
            '; '.join(r['dates']),
        ])
    return _write(rows)


def weekly_summary_csv(summary):
    rows = [['Date', 'Total Students', 'Present', 'Absent', 'Attendance Rate %', 'Reports Count']]
    for day in summary['daily_breakdown']:
        rows.append([
            day['date'],
            day['total_students'],
            day['present_students'],
            day['absent_students'],
            day['attendance_rate'],
            day['reports_count'],
        ])

    rows.extend([
        [],
        ['WEEKLY SUMMARY'],
        ['Total Reports', summary['total_reports']],
        ['Average Daily Students', summary['total_students']],
        ['Overall Attendance Rate', f"{summary['avg_attendance']}%"],
        ['Health Incidents', summary['health_incidents']],
        ['Discipline Incidents', summary['discipline_incidents']],
        [],
        ['CLASS BREAKDOWN'],
        ['Class', 'Reports', 'Avg Attendance', 'Health Issues', 'Discipline Issues'],
    ])
    for cls in summary['class_summaries']:
        rows.append([
            cls['class_name'],
            cls['reports_submitted'],
            f"{cls['avg_attendance']}%",
            cls['health_issues'],
            cls['discipline_issues'],
        ])
    return _write(rows)


def monthly_summary_csv(summary):
    stats = summary['stats']
    rows = [
        ['Monthly Summary Report'],
        [f"Month: {summary['month_label']}"],
        [],
        ['OVERVIEW'],
        ['Total Reports', stats['total_reports']],
        ['Average Attendance Rate', f"{stats['avg_attendance_rate']}%"],
        ['Health Incidents', stats['health_incidents']],
        ['Discipline Incidents', stats['discipline_incidents']],
        ['Critical/High Severity', stats['critical_incidents']],
        ['Lessons Not Covered', stats['lessons_not_covered']],
        [],
        ['WEEKLY BREAKDOWN'],
        ['Week', 'Reports', 'Avg Attendance', 'Incidents'],
    ]
    for week in summary['weekly_breakdown']:
        rows.append([
            f"{week['week_start']} - {week['week_end']}",
            week['reports'],
            f"{week['avg_attendance']}%",
            week['incidents'],
        ])

    rows.extend([[], ['CLASS PERFORMANCE'], ['Class', 'Reports', 'Avg Attendance', 'Incidents']])
    for cls in summary['class_performance']:
        rows.append([cls['class_name'], cls['total_reports'], f"{cls['avg_attendance']}%", cls['incidents']])
    return _write(rows)
