"""
Test fixtures for the school portal.

Provides an app on in-memory SQLite, a client, a seeded school and a helper
that builds bearer headers for any user.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from flask_jwt_extended import create_access_token

from schoolportal import create_app, db
from schoolportal.config import Config
from schoolportal.models import (
    Users, Classes, Subjects, StudentProfile, TeacherProfile,
    ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER,
)


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-long-enough-for-hs256"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "WARNING"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(name, email, role):
    u = Users(name=name, email=email, role=role)
    u.set_password("Passw0rd!")
    db.session.add(u)
    db.session.flush()
    return u


@pytest.fixture
def school(app):
    """
    Class 7A with students s1..s3, class 7B with s4, teacher (math) and
    teacher2 (physics), an admin and a student account without a profile.
    """
    admin = _user("Admin", "admin@test.local", ROLE_ADMIN)

    t_user = _user("Teacher One", "t1@test.local", ROLE_TEACHER)
    t2_user = _user("Teacher Two", "t2@test.local", ROLE_TEACHER)
    teacher = TeacherProfile(user_id=t_user.id, specialization="Math")
    teacher2 = TeacherProfile(user_id=t2_user.id, specialization="Physics")
    db.session.add_all([teacher, teacher2])
    db.session.flush()

    class_a = Classes(name="7A", grade=7, class_teacher_id=teacher.id)
    class_b = Classes(name="7B", grade=7)
    db.session.add_all([class_a, class_b])
    db.session.flush()

    math = Subjects(name="Mathematics", teacher_id=teacher.id)
    physics = Subjects(name="Physics", teacher_id=teacher2.id)
    db.session.add_all([math, physics])
    db.session.flush()

    students = []
    for n, class_id in enumerate((class_a.id, class_a.id, class_a.id, class_b.id), start=1):
        u = _user(f"Student {n}", f"s{n}@test.local", ROLE_STUDENT)
        sp = StudentProfile(user_id=u.id, class_id=class_id, student_number=f"N{n}")
        db.session.add(sp)
        db.session.flush()
        students.append(sp)

    no_profile = _user("Loose Student", "loose@test.local", ROLE_STUDENT)
    db.session.commit()

    return SimpleNamespace(
        admin_user=admin.id,
        teacher_user=t_user.id,
        teacher2_user=t2_user.id,
        teacher=teacher.id,
        teacher2=teacher2.id,
        class_a=class_a.id,
        class_b=class_b.id,
        math=math.id,
        physics=physics.id,
        s1=students[0].id, s2=students[1].id, s3=students[2].id, s4=students[3].id,
        s1_user=students[0].user_id, s2_user=students[1].user_id,
        s3_user=students[2].user_id, s4_user=students[3].user_id,
        no_profile_user=no_profile.id,
    )


@pytest.fixture
def headers(app):
    """headers(user_id) -> bearer Authorization header."""
    def _headers(user_id):
        token = create_access_token(identity=str(user_id))
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_homework(client, school, headers):
    """Create a homework as teacher one; keyword arguments override the body."""
    def _make(**overrides):
        body = {
            "subject_id": school.math,
            "teacher_id": school.teacher,
            "title": "Worksheet",
            "description": "Do the exercises.",
            "due_date": "2026-11-01T18:00:00",
            "class_id": school.class_a,
        }
        body.update(overrides)
        body = {k: v for k, v in body.items() if v is not None}
        resp = client.post("/homeworks", json=body, headers=headers(school.teacher_user))
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["homework"]
    return _make
