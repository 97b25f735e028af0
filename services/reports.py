"""
Daily report lifecycle: validating submitted fields, saving reports,
deriving incidents and attaching head comments.
"""

import logging
from datetime import date

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import DailyReport, Incident, HeadComment, Class, User, SEVERITIES, INCIDENT_SEVERITIES
from decorators import ADMIN_ROLE, TEACHER_ROLE, COMMENTER_ROLES, is_reviewer_role
from utils.dates import parse_date
from .cache import invalidate_report_aggregates

logger = logging.getLogger(__name__)

TRUE_VALUES = ('1', 'true', 'on', 'yes', 'y')

TEXT_FIELDS = (
    'absentees', 'health_details', 'feeding_status', 'literacy_topic',
    'discipline_details', 'parent_details', 'challenges',
)
FLAG_FIELDS = ('health_incident', 'lessons_covered', 'discipline_issue', 'parent_communication')
LIKE_ESCAPE = '\\'


class ReportError(Exception):
    """Base class for report workflow errors."""
    status_code = 400


class ReportValidationError(ReportError):
    def __init__(self, errors):
        self.errors = errors
        super().__init__('; '.join(f"{k}: {v}" for k, v in errors.items()))


class DuplicateReportError(ReportError):
    status_code = 409


class NoClassAssignedError(ReportError):
    status_code = 404


def _flag(form, name, default=False):
    value = form.get(name)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def _text(form, name):
    value = form.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _count(form, name, errors):
    raw = form.get(name)
    if raw is None or str(raw).strip() == '':
        errors[name] = 'This field is required.'
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        errors[name] = 'Must be a whole number.'
        return None
    if value < 0:
        errors[name] = 'Cannot be negative.'
        return None
    return value


def _severity(form, name, flagged, errors):
    value = _text(form, name)
    if not flagged or value is None:
        return None
    value = value.lower()
    if value not in SEVERITIES:
        errors[name] = f"Must be one of: {', '.join(SEVERITIES)}."
        return None
    return value


def parse_report_form(form, today=None, require_date=False):
    """
    Validate and normalise submitted report fields.

    Severities and details are cleared when their flag is off. Raises
    ReportValidationError with a field -> message mapping.
    """
    today = today or date.today()
    errors = {}

    try:
        report_date = parse_date(form.get('report_date'), default=None if require_date else today)
    except ValueError:
        errors['report_date'] = 'Use the YYYY-MM-DD format.'
        report_date = None
    if report_date is None and 'report_date' not in errors and require_date:
        errors['report_date'] = 'This field is required.'
    if report_date and report_date > today:
        errors['report_date'] = 'Reports cannot be dated in the future.'

    total = _count(form, 'total_learners', errors)
    present = _count(form, 'present_learners', errors)
    if total is not None and present is not None and present > total:
        errors['present_learners'] = 'Cannot exceed total learners.'

    data = {name: _text(form, name) for name in TEXT_FIELDS}
    data['health_incident'] = _flag(form, 'health_incident')
    data['discipline_issue'] = _flag(form, 'discipline_issue')
    data['parent_communication'] = _flag(form, 'parent_communication')
    data['lessons_covered'] = _flag(form, 'lessons_covered', default=True)
    data['health_severity'] = _severity(form, 'health_severity', data['health_incident'], errors)
    data['discipline_severity'] = _severity(form, 'discipline_severity', data['discipline_issue'], errors)

    if not data['health_incident']:
        data['health_details'] = None
    if not data['discipline_issue']:
        data['discipline_details'] = None
    if not data['parent_communication']:
        data['parent_details'] = None

    if errors:
        raise ReportValidationError(errors)

    data['report_date'] = report_date
    data['total_learners'] = total
    data['present_learners'] = present
    return data


def derive_incidents(report):
    """Replace the report's incidents with one per high/critical flag."""
    for incident in list(report.incidents):
        report.incidents.remove(incident)

    candidates = (
        ('health', report.health_incident, report.health_severity, report.health_details),
        ('discipline', report.discipline_issue, report.discipline_severity, report.discipline_details),
    )
    for incident_type, flagged, severity, details in candidates:
        if flagged and severity in INCIDENT_SEVERITIES:
            report.incidents.append(Incident(
                class_id=report.class_id,
                incident_date=report.report_date,
                incident_type=incident_type,
                severity=severity,
                details=details,
            ))
    return report.incidents


def submit_report(teacher, form, today=None):
    """Create today's (or the given date's) report for the teacher's class."""
    class_obj = teacher.assigned_class
    if class_obj is None:
        raise NoClassAssignedError('No class is assigned to this teacher.')

    data = parse_report_form(form, today=today)
    report = DailyReport(teacher_id=teacher.id, class_id=class_obj.id, **data)
    db.session.add(report)
    derive_incidents(report)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateReportError(
            f"A report for {class_obj.display_name} on {data['report_date'].isoformat()} already exists."
        )

    invalidate_report_aggregates()
    logger.info("Report %s submitted for class %s on %s", report.id, class_obj.id, report.report_date)
    return report


def update_report(report, form, today=None):
    """Rewrite the editable fields; the report date and class stay fixed."""
    data = parse_report_form(form, today=today)
    data.pop('report_date')
    for name, value in data.items():
        setattr(report, name, value)
    derive_incidents(report)
    db.session.commit()
    invalidate_report_aggregates()
    logger.info("Report %s updated", report.id)
    return report


def add_comment(report, author, text):
    text = '' if text is None else str(text).strip()
    if not text:
        raise ReportValidationError({'comment': 'Comment cannot be empty.'})
    comment = HeadComment(report_id=report.id, headteacher_id=author.id, comment=text)
    db.session.add(comment)
    db.session.commit()
    return comment


def can_view(user, report):
    if is_reviewer_role(user.role):
        return True
    return user.role == TEACHER_ROLE and report.teacher_id == user.id


def can_edit(user, report):
    if user.role == ADMIN_ROLE:
        return True
    return user.role == TEACHER_ROLE and report.teacher_id == user.id


def can_comment(user):
    return user.role in COMMENTER_ROLES


def escape_like(text):
    """Make % and _ in user search text match literally."""
    return (text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
            .replace('%', LIKE_ESCAPE + '%')
            .replace('_', LIKE_ESCAPE + '_'))


def history_query(user, date_from=None, date_to=None, has_issues=False, grade=None, search=None):
    """
    Reports visible to ``user``, newest first, narrowed by the history filters.
    Teachers only ever see their own reports.
    """
    query = DailyReport.query.join(Class, DailyReport.class_id == Class.id).join(
        User, DailyReport.teacher_id == User.id
    )
    if not is_reviewer_role(user.role):
        query = query.filter(DailyReport.teacher_id == user.id)
    if date_from:
        query = query.filter(DailyReport.report_date >= date_from)
    if date_to:
        query = query.filter(DailyReport.report_date <= date_to)
    if has_issues:
        query = query.filter(or_(DailyReport.health_incident.is_(True),
                                 DailyReport.discipline_issue.is_(True)))
    if grade:
        query = query.filter(Class.grade == grade)
    if search:
        pattern = f"%{escape_like(search.strip().lower())}%"
        query = query.filter(or_(
            db.func.lower(User.full_name).like(pattern, escape=LIKE_ESCAPE),
            db.func.lower(Class.stream).like(pattern, escape=LIKE_ESCAPE),
            db.func.lower(Class.grade).like(pattern, escape=LIKE_ESCAPE),
        ))
    return query.order_by(DailyReport.report_date.desc(), DailyReport.id.desc())


def delete_report(report):
    db.session.delete(report)
    db.session.commit()
    invalidate_report_aggregates()
