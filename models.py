from flask_login import UserMixin
from datetime import datetime
from extensions import db

ROLES = ('teacher', 'headteacher', 'director', 'admin')
SEVERITIES = ('low', 'medium', 'high', 'critical')
INCIDENT_SEVERITIES = ('high', 'critical')


class User(db.Model, UserMixin):
    """
    Login account and profile for everyone who uses the dashboard.
    The role decides which blueprints the user may reach.
    """
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    full_name = db.Column(db.String(150), nullable=False)
    role = db.Column(db.String(20), nullable=False)  # teacher, headteacher, director, admin
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    class_assignments = db.relationship('TeacherClass', backref='teacher', lazy=True,
                                        cascade='all, delete-orphan')

    @property
    def assigned_class(self):
        """The teacher's class; one active assignment per teacher."""
        if not self.class_assignments:
            return None
        return self.class_assignments[0].class_info

    def to_dict(self):
        assigned = self.assigned_class
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'role': self.role,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'assigned_class': assigned.to_dict() if assigned else None,
        }

    def __repr__(self):
        return f"User('{self.email}', '{self.role}')"


class Class(db.Model):
    """
    A grade/stream pair, e.g. Grade 4 - East.
    """
    __table_args__ = (db.UniqueConstraint('grade', 'stream', name='uq_class_grade_stream'),)

    id = db.Column(db.Integer, primary_key=True)
    grade = db.Column(db.String(50), nullable=False)
    stream = db.Column(db.String(50), nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    teacher_assignments = db.relationship('TeacherClass', backref='class_info', lazy=True,
                                          cascade='all, delete-orphan')
    reports = db.relationship('DailyReport', backref='class_info', lazy=True,
                              cascade='all, delete-orphan')

    @property
    def display_name(self):
        return f"{self.grade} - {self.stream}"

    @property
    def teacher(self):
        if not self.teacher_assignments:
            return None
        return self.teacher_assignments[0].teacher

    def to_dict(self):
        return {
            'id': self.id,
            'grade': self.grade,
            'stream': self.stream,
            'name': self.display_name,
            'active': self.active,
        }

    def __repr__(self):
        return f"Class('{self.grade}', Stream: '{self.stream}')"


class TeacherClass(db.Model):
    """Assignment of a teacher to the class they report for."""
    __table_args__ = (db.UniqueConstraint('teacher_id', 'class_id', name='uq_teacher_class'),)

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"TeacherClass(Teacher: {self.teacher_id}, Class: {self.class_id})"


class DailyReport(db.Model):
    """
    One teacher's end-of-day report for one class.
    """
    __table_args__ = (db.UniqueConstraint('report_date', 'class_id', name='uq_report_date_class'),)

    id = db.Column(db.Integer, primary_key=True)
    report_date = db.Column(db.Date, nullable=False, index=True)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    teacher_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)

    total_learners = db.Column(db.Integer, nullable=False)
    present_learners = db.Column(db.Integer, nullable=False)
    absentees = db.Column(db.Text, nullable=True)  # free-text names

    health_incident = db.Column(db.Boolean, default=False, nullable=False)
    health_severity = db.Column(db.String(20), nullable=True)
    health_details = db.Column(db.Text, nullable=True)

    feeding_status = db.Column(db.String(255), nullable=True)
    lessons_covered = db.Column(db.Boolean, default=True, nullable=False)
    literacy_topic = db.Column(db.String(255), nullable=True)

    discipline_issue = db.Column(db.Boolean, default=False, nullable=False)
    discipline_severity = db.Column(db.String(20), nullable=True)
    discipline_details = db.Column(db.Text, nullable=True)

    parent_communication = db.Column(db.Boolean, default=False, nullable=False)
    parent_details = db.Column(db.Text, nullable=True)

    challenges = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    teacher = db.relationship('User', backref=db.backref('reports', lazy=True, cascade='all, delete-orphan'), lazy=True)
    comments = db.relationship('HeadComment', backref='report', lazy=True,
                               order_by='HeadComment.created_at',
                               cascade='all, delete-orphan')
    incidents = db.relationship('Incident', backref='report', lazy=True,
                                cascade='all, delete-orphan')

    @property
    def absent_learners(self):
        return self.total_learners - self.present_learners

    def to_dict(self, include_comments=False):
        data = {
            'id': self.id,
            'report_date': self.report_date.isoformat(),
            'class_id': self.class_id,
            'class_name': self.class_info.display_name if self.class_info else 'Unknown',
            'grade': self.class_info.grade if self.class_info else None,
            'stream': self.class_info.stream if self.class_info else None,
            'teacher_id': self.teacher_id,
            'teacher_name': self.teacher.full_name if self.teacher else 'Unknown',
            'total_learners': self.total_learners,
            'present_learners': self.present_learners,
            'absent_learners': self.absent_learners,
            'absentees': self.absentees,
            'health_incident': self.health_incident,
            'health_severity': self.health_severity,
            'health_details': self.health_details,
            'feeding_status': self.feeding_status,
            'lessons_covered': self.lessons_covered,
            'literacy_topic': self.literacy_topic,
            'discipline_issue': self.discipline_issue,
            'discipline_severity': self.discipline_severity,
            'discipline_details': self.discipline_details,
            'parent_communication': self.parent_communication,
            'parent_details': self.parent_details,
            'challenges': self.challenges,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_comments:
            data['comments'] = [c.to_dict() for c in self.comments]
        return data

    def __repr__(self):
        return f"DailyReport(Class: {self.class_id}, Date: {self.report_date})"


class Incident(db.Model):
    """
    High or critical health/discipline event, derived from a daily report.
    """
    id = db.Column(db.Integer, primary_key=True)
    report_id = db.Column(db.Integer, db.ForeignKey('daily_report.id'), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    incident_date = db.Column(db.Date, nullable=False, index=True)
    incident_type = db.Column(db.String(20), nullable=False)  # health, discipline
    severity = db.Column(db.String(20), nullable=False)
    details = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'report_id': self.report_id,
            'class_id': self.class_id,
            'incident_date': self.incident_date.isoformat(),
            'incident_type': self.incident_type,
            'severity': self.severity,
            'details': self.details,
        }

    def __repr__(self):
        return f"Incident({self.incident_type}, {self.severity}, Report: {self.report_id})"


class HeadComment(db.Model):
    """Feedback left on a daily report by a headteacher."""
    id = db.Column(db.Integer, primary_key=True)
    report_id = db.Column(db.Integer, db.ForeignKey('daily_report.id'), nullable=False, index=True)
    headteacher_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    comment = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    author = db.relationship('User', backref=db.backref('head_comments', lazy=True), lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'comment': self.comment,
            'author': self.author.full_name if self.author else 'Unknown',
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class SchoolSettings(db.Model):
    """
    Singleton row with the school profile, academic calendar and alert settings.
    """
    id = db.Column(db.Integer, primary_key=True)
    school_name = db.Column(db.String(200), nullable=False)
    school_motto = db.Column(db.String(255), nullable=True)
    school_address = db.Column(db.Text, nullable=True)
    school_phone = db.Column(db.String(50), nullable=True)
    school_email = db.Column(db.String(120), nullable=True)
    academic_year = db.Column(db.String(20), nullable=False)
    current_term = db.Column(db.String(50), nullable=False)
    term_start_date = db.Column(db.Date, nullable=True)
    term_end_date = db.Column(db.Date, nullable=True)
    report_deadline_time = db.Column(db.String(5), nullable=True)  # HH:MM
    enable_email_alerts = db.Column(db.Boolean, default=False, nullable=False)
    alert_email = db.Column(db.String(120), nullable=True)
    updated_at = db.Column(db.DateTime, nullable=True)
    updated_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)

    updater = db.relationship('User', backref=db.backref('settings_updates', lazy=True), lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'school_name': self.school_name,
            'school_motto': self.school_motto,
            'school_address': self.school_address,
            'school_phone': self.school_phone,
            'school_email': self.school_email,
            'academic_year': self.academic_year,
            'current_term': self.current_term,
            'term_start_date': self.term_start_date.isoformat() if self.term_start_date else None,
            'term_end_date': self.term_end_date.isoformat() if self.term_end_date else None,
            'report_deadline_time': self.report_deadline_time,
            'enable_email_alerts': self.enable_email_alerts,
            'alert_email': self.alert_email,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class ActivityLog(db.Model):
    """
    Model for tracking user activities for auditing and security purposes.
    """
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    action = db.Column(db.String(100), nullable=False)
    details = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.Text, nullable=True)
    success = db.Column(db.Boolean, default=True)
    error_message = db.Column(db.Text, nullable=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User', backref='activity_logs', lazy=True)

    def __repr__(self):
        return f"ActivityLog(User: {self.user_id}, Action: {self.action}, Success: {self.success})"
