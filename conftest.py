"""
Shared pytest fixtures: an app on in-memory SQLite, a seeded school and a
login helper for the test client.
"""

from datetime import date

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from config import TestingConfig
from extensions import db
from models import User, Class, TeacherClass, DailyReport
from services.cache import invalidate

PASSWORD = 'password123'


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
    invalidate()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(email, full_name, role):
    user = User(email=email, full_name=full_name, role=role,
                password_hash=generate_password_hash(PASSWORD))
    db.session.add(user)
    return user


@pytest.fixture
def seed(app):
    """
    Two active classes with a teacher each, an inactive class, a teacher
    without a class and one account per reviewer role. Returns their ids.
    """
    with app.app_context():
        east = Class(grade='Grade 4', stream='East')
        west = Class(grade='Grade 5', stream='West')
        closed = Class(grade='Grade 6', stream='North', active=False)
        db.session.add_all([east, west, closed])

        teacher1 = _user('teacher1@school.test', 'Alice Wanjiru', 'teacher')
        teacher2 = _user('teacher2@school.test', 'Brian Otieno', 'teacher')
        teacher3 = _user('teacher3@school.test', 'Carol Mutua', 'teacher')
        head = _user('head@school.test', 'Grace Njeri', 'headteacher')
        director = _user('director@school.test', 'David Kamau', 'director')
        admin = _user('admin@school.test', 'Esther Admin', 'admin')
        db.session.flush()

        db.session.add_all([
            TeacherClass(teacher_id=teacher1.id, class_id=east.id),
            TeacherClass(teacher_id=teacher2.id, class_id=west.id),
        ])
        db.session.commit()

        return {
            'east': east.id,
            'west': west.id,
            'closed': closed.id,
            'teacher1': teacher1.id,
            'teacher2': teacher2.id,
            'teacher3': teacher3.id,
            'head': head.id,
            'director': director.id,
            'admin': admin.id,
        }


@pytest.fixture
def login(client):
    """login('teacher1') signs the client in with a seeded account."""
    def _login(name):
        return client.post('/login', data={'email': f'{name}@school.test', 'password': PASSWORD})
    return _login


@pytest.fixture
def add_report(app):
    """Insert a report directly and return its id."""
    def _add(class_id, teacher_id, report_date=None, total=30, present=27, **fields):
        with app.app_context():
            report = DailyReport(
                class_id=class_id,
                teacher_id=teacher_id,
                report_date=report_date or date.today(),
                total_learners=total,
                present_learners=present,
                **fields
            )
            db.session.add(report)
            db.session.commit()
            return report.id
    return _add
