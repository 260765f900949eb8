import json
from datetime import datetime
from typing import Optional

from werkzeug.security import generate_password_hash, check_password_hash

from . import db, jwt
from .audience import Audience, ClassWide, Individual

ROLE_STUDENT, ROLE_TEACHER, ROLE_ADMIN = "student", "teacher", "admin"

class Users(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    role = db.Column(db.String(16), nullable=False, default=ROLE_STUDENT)
    hashed_pw = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    def set_password(self, raw): self.hashed_pw = generate_password_hash(raw)
    def check_password(self, raw): return check_password_hash(self.hashed_pw, raw)

    @property
    def role_name(self) -> str:
        # stored roles may carry stray case or whitespace
        return (self.role or ROLE_STUDENT).strip().lower()

@jwt.user_lookup_loader
def load_user(_jwt_header, jwt_data) -> Optional["Users"]:
    return db.session.get(Users, int(jwt_data["sub"]))

class TeacherProfile(db.Model):
    __tablename__ = "teacher_profiles"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    specialization = db.Column(db.String(120))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<TeacherProfile user={self.user_id}>"

class Classes(db.Model):
    __tablename__ = "classes"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    grade = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text)
    class_teacher_id = db.Column(db.Integer, db.ForeignKey("teacher_profiles.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    class_teacher = db.relationship("TeacherProfile", backref="classes_led")

class StudentProfile(db.Model):
    __tablename__ = "student_profiles"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id", ondelete="SET NULL"), index=True)
    student_number = db.Column(db.String(32))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # students currently in the class; membership is the live roster
    school_class = db.relationship("Classes", backref=db.backref("students", lazy="select", order_by="StudentProfile.id"))

    def __repr__(self) -> str:
        return f"<StudentProfile user={self.user_id} class={self.class_id}>"

# 1-1 relations from Users
Users.student_profile = db.relationship(
    "StudentProfile",
    uselist=False,
    backref="user",
    cascade="all, delete-orphan"
)
Users.teacher_profile = db.relationship(
    "TeacherProfile",
    uselist=False,
    backref="user",
    cascade="all, delete-orphan"
)

class Subjects(db.Model):
    __tablename__ = "subjects"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.Text)
    teacher_id = db.Column(db.Integer, db.ForeignKey("teacher_profiles.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    teacher = db.relationship("TeacherProfile", backref="subjects")


class Homeworks(db.Model):
    """An assignment for exactly one student or for a whole class."""
    __tablename__ = "homeworks"
    id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("student_profiles.id", ondelete="CASCADE"), index=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    due_date = db.Column(db.DateTime, nullable=False, index=True)
    attachments = db.Column(db.Text)                          # JSON list of URLs
    completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint(
            "(student_id IS NULL) <> (class_id IS NULL)",
            name="ck_homeworks_single_audience",
        ),
    )

    subject = db.relationship("Subjects")
    teacher = db.relationship("TeacherProfile")
    student = db.relationship("StudentProfile")
    school_class = db.relationship("Classes")
    completions = db.relationship(
        "HomeworkCompletions",
        back_populates="homework",
        cascade="all, delete-orphan",
        order_by="HomeworkCompletions.completed_at",
    )

    @property
    def audience(self) -> Audience:
        if self.student_id is not None:
            return Individual(self.student_id)
        if self.class_id is not None:
            return ClassWide(self.class_id)
        raise ValueError(f"homework {self.id} has no audience")

    @property
    def attachment_list(self) -> list:
        """Stored attachments as a list; unreadable values read as empty."""
        if not self.attachments:
            return []
        try:
            parsed = json.loads(self.attachments)
        except (TypeError, ValueError):
            return []
        if not isinstance(parsed, list):
            return []
        return [str(a) for a in parsed]

    @attachment_list.setter
    def attachment_list(self, urls):
        self.attachments = json.dumps(list(urls)) if urls else None


class HomeworkCompletions(db.Model):
    __tablename__ = "homework_completions"
    id = db.Column(db.Integer, primary_key=True)
    homework_id = db.Column(db.Integer, db.ForeignKey("homeworks.id", ondelete="CASCADE"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False)
    completed_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    __table_args__ = (db.UniqueConstraint("homework_id", "student_id", name="uq_homework_completions_homework_student"),)

    homework = db.relationship("Homeworks", back_populates="completions")
    student = db.relationship("StudentProfile")


class Grades(db.Model):
    __tablename__ = "grades"
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    teacher_id = db.Column(db.Integer, db.ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False)
    value = db.Column(db.Integer, nullable=False)            # 2..5
    comment = db.Column(db.Text)
    date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    student = db.relationship("StudentProfile")
    subject = db.relationship("Subjects")
    teacher = db.relationship("TeacherProfile")


class Notifications(db.Model):
    __tablename__ = "notifications"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = db.Column(db.String(40), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    read = db.Column(db.Boolean, nullable=False, default=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)


class ActivityLogs(db.Model):
    __tablename__ = "activity_logs"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), index=True)
    action = db.Column(db.String(20), nullable=False)        # create|update|delete
    entity = db.Column(db.String(40), nullable=False, index=True)
    entity_id = db.Column(db.String(64))
    details = db.Column(db.Text)                              # serialized JSON
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    user = db.relationship("Users")
