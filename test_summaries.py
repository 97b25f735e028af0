from datetime import date

from services.summaries import (
    weekly_summary, monthly_summary, daily_stats, director_stats, filter_dashboard_reports,
    report_status, attendance_band,
)


def row(day, grade='Grade 4', stream='East', total=30, present=27, health=False,
        discipline=False, parent=False, lessons=True):
    return {
        'report_date': day,
        'grade': grade,
        'stream': stream,
        'total_learners': total,
        'present_learners': present,
        'health_incident': health,
        'discipline_issue': discipline,
        'parent_communication': parent,
        'lessons_covered': lessons,
    }


def week_rows():
    return [
        row(date(2026, 1, 5), present=27, health=True),
        row(date(2026, 1, 5), grade='Grade 5', stream='West', total=20, present=15),
        row(date(2026, 1, 6), present=30, discipline=True, parent=True),
    ]


def test_weekly_daily_breakdown():
    summary = weekly_summary(week_rows(), date(2026, 1, 7))
    assert summary['start_date'] == '2026-01-05'
    assert summary['end_date'] == '2026-01-11'

    monday, tuesday = summary['daily_breakdown']
    assert monday['date'] == '2026-01-05'
    assert monday['display_date'] == 'Mon, Jan 5'
    assert monday['total_students'] == 50
    assert monday['present_students'] == 42
    assert monday['attendance_rate'] == 84
    assert monday['reports_count'] == 2
    assert tuesday['attendance_rate'] == 100


def test_weekly_class_summaries():
    classes = weekly_summary(week_rows(), date(2026, 1, 5))['class_summaries']
    assert [c['class_name'] for c in classes] == ['Grade 4 - East', 'Grade 5 - West']
    east = classes[0]
    assert east['reports_submitted'] == 2
    assert east['avg_attendance'] == 95  # mean of 90 and 100
    assert east['health_issues'] == 1
    assert east['discipline_issues'] == 1
    assert classes[1]['avg_attendance'] == 75


def test_weekly_totals():
    summary = weekly_summary(week_rows(), date(2026, 1, 5))
    assert summary['total_reports'] == 3
    assert summary['total_students'] == 40  # 80 learners over 2 reported days
    assert summary['avg_attendance'] == 90
    assert summary['total_present'] == 72
    assert summary['total_absent'] == 8
    assert summary['health_incidents'] == 1
    assert summary['discipline_incidents'] == 1
    assert summary['parent_communications'] == 1


def test_weekly_zero_learner_report_counts_as_zero_rate():
    rows = [row(date(2026, 1, 5), total=0, present=0), row(date(2026, 1, 6), present=30)]
    east = weekly_summary(rows, date(2026, 1, 5))['class_summaries'][0]
    assert east['avg_attendance'] == 50


def test_weekly_empty():
    summary = weekly_summary([], date(2026, 1, 5))
    assert summary['total_reports'] == 0
    assert summary['total_students'] == 0
    assert summary['avg_attendance'] == 0
    assert summary['daily_breakdown'] == []


def month_rows():
    return [
        row(date(2026, 3, 2), present=24, health=True),
        row(date(2026, 3, 3), grade='Grade 5', stream='West', total=20, present=20, lessons=False),
        row(date(2026, 3, 10), present=27, discipline=True),
    ]


def test_monthly_stats():
    summary = monthly_summary(month_rows(), ['high', 'low', 'critical'], date(2026, 3, 15))
    assert summary['month'] == '2026-03'
    assert summary['month_label'] == 'March 2026'
    stats = summary['stats']
    assert stats['total_reports'] == 3
    assert stats['total_students'] == 80
    assert stats['total_present'] == 71
    assert stats['avg_attendance_rate'] == 89
    assert stats['health_incidents'] == 1
    assert stats['discipline_incidents'] == 1
    assert stats['critical_incidents'] == 2
    assert stats['lessons_not_covered'] == 1


def test_monthly_weekly_breakdown():
    weeks = monthly_summary(month_rows(), [], date(2026, 3, 1))['weekly_breakdown']
    assert len(weeks) == 6
    assert (weeks[0]['week_start'], weeks[0]['week_end']) == ('Feb 23', 'Mar 1')
    assert weeks[0]['reports'] == 0
    assert weeks[0]['avg_attendance'] == 0
    assert weeks[1]['reports'] == 2
    assert weeks[1]['avg_attendance'] == 88
    assert weeks[1]['incidents'] == 1
    assert weeks[2]['reports'] == 1
    assert weeks[2]['avg_attendance'] == 90


def test_monthly_class_performance_sorted_by_attendance():
    classes = monthly_summary(month_rows(), [], date(2026, 3, 1))['class_performance']
    assert [c['class_name'] for c in classes] == ['Grade 5 - West', 'Grade 4 - East']
    assert classes[0]['avg_attendance'] == 100
    assert classes[1]['avg_attendance'] == 85
    assert classes[1]['total_reports'] == 2
    assert classes[1]['incidents'] == 2


def test_daily_stats():
    stats = daily_stats(week_rows()[:2], total_classes=3)
    assert stats == {
        'total_reports': 2,
        'total_students': 50,
        'present_students': 42,
        'absent_students': 8,
        'health_issues': 1,
        'discipline_issues': 0,
        'classes_reported': 2,
        'total_classes': 3,
        'attendance_percentage': 84,
    }


def test_dashboard_filters():
    reports = [
        {'id': 1, 'health_incident': True, 'discipline_issue': False, 'comments': []},
        {'id': 2, 'health_incident': False, 'discipline_issue': False, 'comments': [{'id': 9}]},
        {'id': 3, 'health_incident': False, 'discipline_issue': True, 'comments': [{'id': 8}]},
    ]
    assert [r['id'] for r in filter_dashboard_reports(reports, 'all')] == [1, 2, 3]
    assert [r['id'] for r in filter_dashboard_reports(reports, 'issues')] == [1, 3]
    assert [r['id'] for r in filter_dashboard_reports(reports, 'pending')] == [1]


def test_director_stats():
    rows = [week_rows()[2], week_rows()[0], week_rows()[1]]
    result = director_stats(rows, total_teachers=4, total_classes=3)

    assert [d['date'] for d in result['daily']] == ['2026-01-05', '2026-01-06']
    assert result['daily'][0]['total_students'] == 50

    east, west = result['class_stats']
    assert (east['grade'], east['stream']) == ('Grade 4', 'East')
    assert east['avg_attendance'] == 95.0
    assert east['total_reports'] == 2
    assert west['avg_attendance'] == 75.0

    assert result['overall'] == {
        'total_teachers': 4,
        'total_classes': 3,
        'avg_attendance': 90,
        'total_reports': 3,
    }


def test_report_status_and_band():
    assert report_status(row(date(2026, 1, 5))) == 'Normal'
    assert report_status(row(date(2026, 1, 5), parent=True)) == 'Needs Attention'
    assert attendance_band(27, 30) == 'good'
    assert attendance_band(23, 30) == 'fair'
    assert attendance_band(20, 30) == 'poor'
    assert attendance_band(0, 0) == 'poor'
