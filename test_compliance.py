from datetime import date

from services.compliance import calculate_compliance

CLASSES = [
    {'id': 1, 'grade': 'Grade 4', 'stream': 'East', 'teacher_id': 10, 'teacher_name': 'Alice Wanjiru'},
    {'id': 2, 'grade': 'Grade 5', 'stream': 'West', 'teacher_id': None, 'teacher_name': None},
]

MONDAY = date(2026, 1, 5)
SUNDAY = date(2026, 1, 11)
THURSDAY = date(2026, 1, 8)


def _submissions():
    return [
        (1, date(2026, 1, 5)), (1, date(2026, 1, 6)), (1, date(2026, 1, 7)), (1, date(2026, 1, 8)),
        (2, date(2026, 1, 6)),
    ]


def test_class_rates_sorted_lowest_first():
    result = calculate_compliance(CLASSES, _submissions(), MONDAY, SUNDAY, today=THURSDAY)

    assert result['school_days'] == 4
    first, second = result['classes']
    assert first['class_name'] == 'Grade 5 - West'
    assert first['teacher_name'] == 'Unassigned'
    assert first['total_expected'] == 4
    assert first['total_submitted'] == 1
    assert first['compliance_rate'] == 25
    assert first['missing_dates'] == ['2026-01-05', '2026-01-07', '2026-01-08']

    assert second['class_name'] == 'Grade 4 - East'
    assert second['compliance_rate'] == 100
    assert second['missing_dates'] == []


def test_end_is_clipped_to_today():
    result = calculate_compliance(CLASSES, _submissions(), MONDAY, SUNDAY, today=THURSDAY)
    assert result['end_date'] == '2026-01-08'
    assert [d['date'] for d in result['daily']] == ['2026-01-08', '2026-01-07', '2026-01-06', '2026-01-05']


def test_daily_figures():
    result = calculate_compliance(CLASSES, _submissions(), MONDAY, SUNDAY, today=THURSDAY)
    by_date = {d['date']: d for d in result['daily']}

    assert by_date['2026-01-06']['submitted'] == 2
    assert by_date['2026-01-06']['missing'] == 0
    assert by_date['2026-01-06']['compliance_rate'] == 100
    assert by_date['2026-01-08']['submitted'] == 1
    assert by_date['2026-01-08']['compliance_rate'] == 50
    assert by_date['2026-01-05']['display_date'] == 'Mon, Jan 5'


def test_overall_figures():
    overall = calculate_compliance(CLASSES, _submissions(), MONDAY, SUNDAY, today=THURSDAY)['overall']
    assert overall['total_expected'] == 8
    assert overall['total_submitted'] == 5
    assert overall['compliance_rate'] == 63  # 62.5 rounds up
    assert overall['perfect_classes'] == 1
    assert overall['missing_classes'] == 1


def test_weekend_reports_do_not_count():
    submissions = _submissions() + [(2, date(2026, 1, 10)), (2, date(2026, 1, 11))]
    result = calculate_compliance(CLASSES, submissions, MONDAY, SUNDAY, today=date(2026, 1, 20))
    west = next(c for c in result['classes'] if c['class_id'] == 2)
    assert west['total_expected'] == 5
    assert west['total_submitted'] == 1


def test_unknown_classes_are_ignored():
    submissions = _submissions() + [(99, date(2026, 1, 5))]
    result = calculate_compliance(CLASSES, submissions, MONDAY, SUNDAY, today=THURSDAY)
    assert result['overall']['total_submitted'] == 5


def test_no_classes_gives_zero_rate():
    result = calculate_compliance([], [], MONDAY, SUNDAY, today=THURSDAY)
    assert result['classes'] == []
    assert result['overall']['compliance_rate'] == 0
    assert all(d['compliance_rate'] == 0 for d in result['daily'])


def test_range_entirely_in_future_expects_nothing():
    result = calculate_compliance(CLASSES, [], date(2026, 2, 2), date(2026, 2, 6), today=THURSDAY)
    assert result['school_days'] == 0
    assert result['overall']['total_expected'] == 0
    assert result['classes'][0]['compliance_rate'] == 0
