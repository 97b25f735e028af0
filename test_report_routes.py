from datetime import date, timedelta

import pytest

from extensions import db
from models import DailyReport, Incident, HeadComment
from utils import pdf_export

TODAY = date.today()


@pytest.fixture
def reports(seed, add_report):
    """Three east reports (one with a health flag) and one west report."""
    return {
        'east_today': add_report(seed['east'], seed['teacher1'], TODAY, health_incident=True,
                                 health_severity='medium'),
        'east_yesterday': add_report(seed['east'], seed['teacher1'], TODAY - timedelta(days=1)),
        'east_old': add_report(seed['east'], seed['teacher1'], TODAY - timedelta(days=30)),
        'west_today': add_report(seed['west'], seed['teacher2'], TODAY, total=20, present=12,
                                 discipline_issue=True),
    }


@pytest.fixture
def fake_pdf(monkeypatch):
    """Capture the HTML handed to the PDF converter."""
    captured = {}

    def _html_to_pdf(html_content):
        captured['html'] = html_content
        return b'%PDF-1.7 test'

    monkeypatch.setattr(pdf_export, 'html_to_pdf', _html_to_pdf)
    return captured


def test_teacher_history_shows_only_own_reports(client, reports, login):
    login('teacher1')
    body = client.get('/reports/history').get_json()
    assert body['total'] == 3
    assert [r['id'] for r in body['reports']] == [
        reports['east_today'], reports['east_yesterday'], reports['east_old'],
    ]


def test_reviewer_history_filters(client, reports, login):
    login('head')
    assert client.get('/reports/history').get_json()['total'] == 4

    body = client.get('/reports/history?has_issues=1').get_json()
    assert {r['id'] for r in body['reports']} == {reports['east_today'], reports['west_today']}
    assert all(r['status'] == 'Needs Attention' for r in body['reports'])

    body = client.get('/reports/history', query_string={'grade': 'Grade 5'}).get_json()
    assert [r['id'] for r in body['reports']] == [reports['west_today']]

    body = client.get('/reports/history?search=alice').get_json()
    assert body['total'] == 3

    since = (TODAY - timedelta(days=7)).isoformat()
    assert client.get(f'/reports/history?date_from={since}').get_json()['total'] == 3
    assert body['grades'] == ['Grade 4', 'Grade 5', 'Grade 6']


def test_history_pagination(app, client, reports, login):
    app.config['HISTORY_PAGE_SIZE'] = 2
    login('director')
    first = client.get('/reports/history').get_json()
    assert len(first['reports']) == 2
    assert first['has_next'] is True
    second = client.get('/reports/history?page=2').get_json()
    assert len(second['reports']) == 2
    assert second['has_next'] is False


def test_history_rejects_bad_dates(client, reports, login):
    login('head')
    assert client.get('/reports/history?date_from=yesterday').status_code == 400


def test_view_report_permissions(client, reports, login):
    url = f"/reports/{reports['east_today']}"
    login('teacher2')
    assert client.get(url).status_code == 403
    client.post('/logout')

    login('teacher1')
    body = client.get(url).get_json()
    assert body['report']['class_name'] == 'Grade 4 - East'
    assert body['report']['status'] == 'Needs Attention'
    assert body['can_edit'] is True
    assert body['can_comment'] is False
    client.post('/logout')

    login('director')
    body = client.get(url).get_json()
    assert body['can_edit'] is False
    assert body['can_comment'] is False


def test_missing_report_is_404(client, reports, login):
    login('head')
    assert client.get('/reports/9999').status_code == 404


def test_owner_edit_rederives_incidents(app, client, reports, login):
    report_id = reports['east_today']
    login('teacher1')
    response = client.post(f'/reports/{report_id}/edit', data={
        'total_learners': '30', 'present_learners': '25',
        'discipline_issue': 'on', 'discipline_severity': 'critical', 'discipline_details': 'Bullying',
    })
    assert response.status_code == 200
    report = response.get_json()['report']
    assert report['present_learners'] == 25
    assert report['health_incident'] is False
    assert report['health_severity'] is None

    with app.app_context():
        incidents = Incident.query.filter_by(report_id=report_id).all()
        assert [(i.incident_type, i.severity) for i in incidents] == [('discipline', 'critical')]

    response = client.post(f'/reports/{report_id}/edit', data={'total_learners': '30', 'present_learners': '30'})
    assert response.status_code == 200
    with app.app_context():
        assert Incident.query.filter_by(report_id=report_id).count() == 0


def test_edit_keeps_report_date(app, client, reports, login):
    login('teacher1')
    client.post(f"/reports/{reports['east_old']}/edit", data={
        'total_learners': '30', 'present_learners': '29', 'report_date': TODAY.isoformat(),
    })
    with app.app_context():
        report = db.session.get(DailyReport, reports['east_old'])
        assert report.report_date == TODAY - timedelta(days=30)


def test_edit_permissions(client, reports, login):
    form = {'total_learners': '20', 'present_learners': '20'}
    login('teacher1')
    assert client.post(f"/reports/{reports['west_today']}/edit", data=form).status_code == 403
    client.post('/logout')

    login('head')
    assert client.post(f"/reports/{reports['west_today']}/edit", data=form).status_code == 403
    client.post('/logout')

    login('admin')
    assert client.post(f"/reports/{reports['west_today']}/edit", data=form).status_code == 200


def test_edit_validation(client, reports, login):
    login('teacher1')
    response = client.post(f"/reports/{reports['east_today']}/edit",
                           data={'total_learners': '10', 'present_learners': '11'})
    assert response.status_code == 400
    assert 'present_learners' in response.get_json()['errors']


def test_headteacher_comments(app, client, reports, login):
    report_id = reports['west_today']
    login('head')
    response = client.post(f'/reports/{report_id}/comments', data={'comment': '  Please follow up with parents. '})
    assert response.status_code == 201
    assert response.get_json()['comment']['comment'] == 'Please follow up with parents.'
    assert response.get_json()['comment']['author'] == 'Grace Njeri'

    comments = client.get(f'/reports/{report_id}').get_json()['report']['comments']
    assert len(comments) == 1

    assert client.post(f'/reports/{report_id}/comments', data={'comment': '   '}).status_code == 400
    with app.app_context():
        assert HeadComment.query.count() == 1


@pytest.mark.parametrize('name', ['teacher2', 'director'])
def test_only_headteachers_and_admins_comment(client, reports, login, name):
    login(name)
    response = client.post(f"/reports/{reports['west_today']}/comments", data={'comment': 'Well done'})
    assert response.status_code == 403


def test_admin_deletes_report(app, client, reports, login):
    login('head')
    assert client.post(f"/reports/{reports['east_old']}/delete").status_code == 403
    client.post('/logout')

    login('admin')
    assert client.post(f"/reports/{reports['east_old']}/delete").status_code == 200
    with app.app_context():
        assert db.session.get(DailyReport, reports['east_old']) is None


def test_report_pdf(client, reports, login, fake_pdf):
    report_id = reports['west_today']
    login('head')
    client.post(f'/reports/{report_id}/comments', data={'comment': 'Discuss at staff meeting'})

    response = client.get(f'/reports/{report_id}/pdf')
    assert response.status_code == 200
    assert response.mimetype == 'application/pdf'
    assert response.data == b'%PDF-1.7 test'
    assert f'report_Grade5-West_{TODAY.isoformat()}.pdf' in response.headers['Content-Disposition']

    html = fake_pdf['html']
    assert 'Lelani School' in html
    assert 'Daily Class Report' in html
    assert 'Brian Otieno' in html
    assert '60%' in html
    assert 'Discuss at staff meeting' in html


def test_report_pdf_respects_view_permission(client, reports, login, fake_pdf):
    login('teacher2')
    assert client.get(f"/reports/{reports['east_today']}/pdf").status_code == 403
    assert 'html' not in fake_pdf


def test_report_pdf_failure(client, reports, login, monkeypatch):
    def _broken(html_content):
        raise pdf_export.PDFExportError('WeasyPrint not installed')

    monkeypatch.setattr(pdf_export, 'html_to_pdf', _broken)
    login('head')
    response = client.get(f"/reports/{reports['east_today']}/pdf")
    assert response.status_code == 500
    assert response.get_json()['success'] is False


@pytest.mark.parametrize('search', ['%', '_', 'a%e', 'grade_4'])
def test_history_search_treats_wildcards_literally(client, reports, login, search):
    login('head')
    body = client.get('/reports/history', query_string={'search': search}).get_json()
    assert body['total'] == 0


def test_numeric_json_comment(client, reports, login):
    login('head')
    response = client.post(f"/reports/{reports['west_today']}/comments", json={'comment': 42})
    assert response.status_code == 201
    assert response.get_json()['comment']['comment'] == '42'


def test_pdf_templates_resolve_from_app(app):
    for name in ('daily_report', 'weekly_summary', 'monthly_summary'):
        assert app.jinja_env.get_template(f'pdf/{name}.html') is not None
