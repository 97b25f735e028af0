from datetime import date, timedelta

from models import DailyReport, Incident, ActivityLog

YESTERDAY = date.today() - timedelta(days=1)


def report_form(**overrides):
    data = {
        'total_learners': '30',
        'present_learners': '28',
        'absentees': 'John Doe, Mary Ann',
        'feeding_status': 'All learners fed',
        'literacy_topic': 'Phonics',
    }
    data.update(overrides)
    return data


def test_dashboard_without_class(client, seed, login):
    login('teacher3')
    body = client.get('/teacher/dashboard').get_json()
    assert body['success'] is True
    assert body['assigned_class'] is None
    assert body['recent_reports'] == []


def test_dashboard_lists_recent_reports(client, seed, login, add_report):
    for offset in range(12):
        add_report(seed['east'], seed['teacher1'], date.today() - timedelta(days=offset))
    add_report(seed['west'], seed['teacher2'])

    login('teacher1')
    body = client.get('/teacher/dashboard').get_json()
    assert body['assigned_class']['name'] == 'Grade 4 - East'
    assert body['today_submitted'] is True
    assert len(body['recent_reports']) == 10
    dates = [r['report_date'] for r in body['recent_reports']]
    assert dates == sorted(dates, reverse=True)
    assert dates[0] == date.today().isoformat()


def test_submit_report(app, client, seed, login):
    login('teacher1')
    response = client.post('/teacher/reports', data=report_form())
    assert response.status_code == 201
    body = response.get_json()
    assert body['report']['class_name'] == 'Grade 4 - East'
    assert body['report']['report_date'] == date.today().isoformat()
    assert body['report']['absent_learners'] == 2
    assert body['incidents'] == []

    with app.app_context():
        assert DailyReport.query.count() == 1
        assert ActivityLog.query.filter_by(action='submit_report').count() == 1


def test_high_severity_creates_incident(app, client, seed, login):
    login('teacher1')
    response = client.post('/teacher/reports', data=report_form(
        report_date=YESTERDAY.isoformat(),
        health_incident='on', health_severity='high', health_details='Fainted during PE',
        discipline_issue='on', discipline_severity='low', discipline_details='Late',
    ))
    assert response.status_code == 201
    incidents = response.get_json()['incidents']
    assert len(incidents) == 1
    assert incidents[0]['incident_type'] == 'health'
    assert incidents[0]['incident_date'] == YESTERDAY.isoformat()

    with app.app_context():
        assert Incident.query.count() == 1


def test_duplicate_report_is_conflict(client, seed, login, add_report):
    add_report(seed['east'], seed['teacher1'], YESTERDAY)
    login('teacher1')
    response = client.post('/teacher/reports', data=report_form(report_date=YESTERDAY.isoformat()))
    assert response.status_code == 409
    assert 'Grade 4 - East' in response.get_json()['message']


def test_invalid_report_lists_errors(client, seed, login):
    login('teacher1')
    response = client.post('/teacher/reports', data=report_form(
        present_learners='31',
        report_date=(date.today() + timedelta(days=1)).isoformat(),
    ))
    assert response.status_code == 400
    errors = response.get_json()['errors']
    assert set(errors) == {'present_learners', 'report_date'}


def test_submit_json_body(client, seed, login):
    login('teacher2')
    response = client.post('/teacher/reports', json={
        'total_learners': 20, 'present_learners': 20, 'lessons_covered': False,
    })
    assert response.status_code == 201
    report = response.get_json()['report']
    assert report['class_name'] == 'Grade 5 - West'
    assert report['lessons_covered'] is False


def test_teacher_without_class_cannot_submit(client, seed, login):
    login('teacher3')
    response = client.post('/teacher/reports', data=report_form())
    assert response.status_code == 404


def test_reviewers_cannot_use_teacher_routes(client, seed, login):
    login('head')
    assert client.get('/teacher/dashboard').status_code == 403
    assert client.post('/teacher/reports', data=report_form()).status_code == 403


def test_teacher_routes_require_login(client, seed):
    assert client.get('/teacher/dashboard').status_code == 401


def test_submission_clears_cached_aggregates(client, seed, login):
    from services.cache import report_cache
    report_cache.ttl = 60
    report_cache.set('compliance:test', {'cached': True})
    login('teacher1')
    client.post('/teacher/reports', data=report_form())
    assert report_cache.get('compliance:test') is None
