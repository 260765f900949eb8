from datetime import datetime, timedelta

from . import db
from .models import (
    Users, Classes, Subjects, StudentProfile, TeacherProfile, Homeworks,
    ROLE_ADMIN, ROLE_TEACHER, ROLE_STUDENT,
)

DEMO_STUDENTS = (
    ("Anna Petrova", "anna@school.local"),
    ("Boris Ivanov", "boris@school.local"),
    ("Clara Smirnova", "clara@school.local"),
)

def ensure_user(name, email, role, password):
    u = Users.query.filter_by(email=email).first()
    if not u:
        u = Users(name=name, email=email, role=role)
        u.set_password(password)
        db.session.add(u)
        db.session.flush()  # makes u.id available
    return u

def run_seed():
    # demo users
    ensure_user("Admin", "admin@school.local", ROLE_ADMIN, "admin123")
    t = ensure_user("Maria Teacher", "teacher@school.local", ROLE_TEACHER, "teacher123")
    if not t.teacher_profile:
        db.session.add(TeacherProfile(user_id=t.id, specialization="Mathematics"))
    db.session.commit()
    teacher = t.teacher_profile

    c = Classes.query.filter_by(name="7A").first()
    if not c:
        c = Classes(name="7A", grade=7, description="Demo class", class_teacher_id=teacher.id)
        db.session.add(c)
        db.session.flush()

    subject = Subjects.query.filter_by(name="Mathematics").first()
    if not subject:
        subject = Subjects(name="Mathematics", description="Algebra and geometry", teacher_id=teacher.id)
        db.session.add(subject)
        db.session.flush()

    students = []
    for n, (name, email) in enumerate(DEMO_STUDENTS, start=1):
        u = ensure_user(name, email, ROLE_STUDENT, "student123")
        sp = u.student_profile
        if not sp:
            sp = StudentProfile(user_id=u.id, class_id=c.id, student_number=f"7A-{n:02d}")
            db.session.add(sp)
            db.session.flush()
        students.append(sp)
    db.session.commit()

    # one homework for the whole class and one for a single student
    if not Homeworks.query.filter_by(teacher_id=teacher.id).first():
        now = datetime.utcnow().replace(microsecond=0)
        db.session.add_all([
            Homeworks(
                subject_id=subject.id, teacher_id=teacher.id, class_id=c.id,
                title="Fractions worksheet",
                description="Exercises 1-20 on page 34.",
                due_date=now + timedelta(days=3),
                attachments='["https://example.com/fractions.pdf"]',
            ),
            Homeworks(
                subject_id=subject.id, teacher_id=teacher.id, student_id=students[0].id,
                title="Extra practice: equations",
                description="Solve the equations from the handout.",
                due_date=now + timedelta(days=5),
            ),
        ])
        db.session.commit()
