"""
School settings singleton.
"""

import re
from datetime import datetime, date

from flask import current_app

from extensions import db
from models import SchoolSettings
from utils.dates import parse_date

DEFAULT_SCHOOL_NAME = 'Lelani School'
DEFAULT_TERM = 'Term 1'

TEXT_SETTINGS = ('school_motto', 'school_address', 'school_phone', 'school_email', 'alert_email')
REQUIRED_SETTINGS = ('school_name', 'academic_year', 'current_term')
TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class SettingsError(Exception):
    def __init__(self, errors):
        self.errors = errors
        super().__init__('; '.join(f"{k}: {v}" for k, v in errors.items()))


def _text(value):
    if value is None:
        return ''
    return str(value).strip()


def get_settings():
    """Return the settings row, creating it with defaults on first use."""
    settings = SchoolSettings.query.order_by(SchoolSettings.id).first()
    if settings is None:
        settings = SchoolSettings(
            school_name=current_app.config.get('SCHOOL_NAME') or DEFAULT_SCHOOL_NAME,
            academic_year=str(date.today().year),
            current_term=DEFAULT_TERM,
        )
        db.session.add(settings)
        db.session.commit()
        current_app.logger.info('Created default school settings')
    return settings


def school_name():
    return get_settings().school_name


def update_settings(settings, form, user):
    """Apply submitted fields; blank optional fields are cleared."""
    errors = {}

    for name in REQUIRED_SETTINGS:
        if name in form:
            value = _text(form.get(name))
            if not value:
                errors[name] = 'This field is required.'
            else:
                setattr(settings, name, value)

    for name in TEXT_SETTINGS:
        if name in form:
            setattr(settings, name, _text(form.get(name)) or None)

    for name in ('term_start_date', 'term_end_date'):
        if name in form:
            try:
                setattr(settings, name, parse_date(form.get(name)))
            except ValueError:
                errors[name] = 'Use the YYYY-MM-DD format.'

    if 'report_deadline_time' in form:
        value = _text(form.get('report_deadline_time'))
        if value and not TIME_PATTERN.match(value):
            errors['report_deadline_time'] = 'Use the HH:MM format.'
        else:
            settings.report_deadline_time = value or None

    if 'enable_email_alerts' in form:
        settings.enable_email_alerts = str(form.get('enable_email_alerts')).lower() in ('1', 'true', 'on', 'yes', 'y')

    if settings.term_start_date and settings.term_end_date and settings.term_end_date < settings.term_start_date:
        errors['term_end_date'] = 'Term end must be on or after term start.'

    if errors:
        db.session.rollback()
        raise SettingsError(errors)

    settings.updated_at = datetime.utcnow()
    settings.updated_by = user.id
    db.session.commit()
    return settings
