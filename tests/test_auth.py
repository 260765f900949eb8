"""
Tests for registration, login and the token-protected profile endpoint.
"""

from __future__ import annotations

from schoolportal.models import Users, ROLE_STUDENT


class TestRegister:

    def test_register(self, client, app):
        resp = client.post("/auth/api/register", json={
            "name": "New Student",
            "email": "New.Student@Example.com",
            "password": "Passw0rd1",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["access_token"]
        user = Users.query.filter_by(email="new.student@example.com").one()
        assert user.role == ROLE_STUDENT
        assert body["user_id"] == user.id

    def test_duplicate_email(self, client, app):
        payload = {"name": "Ann Lee", "email": "ann@example.com", "password": "Passw0rd1"}
        assert client.post("/auth/api/register", json=payload).status_code == 201
        resp = client.post("/auth/api/register", json=payload)
        assert resp.status_code == 409

    def test_weak_password(self, client, app):
        resp = client.post("/auth/api/register", json={
            "name": "Ann Lee", "email": "ann@example.com", "password": "short",
        })
        assert resp.status_code == 400
        assert "password" in resp.get_json()["errors"]


class TestLogin:

    def test_login(self, client, school):
        resp = client.post("/auth/api/login", json={"email": "s1@test.local", "password": "Passw0rd!"})
        assert resp.status_code == 200
        token = resp.get_json()["access_token"]

        me = client.get("/auth/api/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        body = me.get_json()
        assert body["role"] == "student"
        assert body["name"] == "Student 1"
        assert body["student_id"] == school.s1
        assert body["class_id"] == school.class_a
        assert body["teacher_id"] is None

    def test_wrong_password(self, client, school):
        resp = client.post("/auth/api/login", json={"email": "s1@test.local", "password": "nope"})
        assert resp.status_code == 401
        assert resp.get_json()["msg"] == "invalid credentials"

    def test_unknown_email(self, client, school):
        resp = client.post("/auth/api/login", json={"email": "ghost@test.local", "password": "x"})
        assert resp.status_code == 401

    def test_missing_fields(self, client, school):
        assert client.post("/auth/api/login", json={}).status_code == 400


class TestTokens:

    def test_me_requires_token(self, client, app):
        assert client.get("/auth/api/me").status_code == 401

    def test_garbage_token(self, client, app):
        resp = client.get("/auth/api/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 422

    def test_teacher_me(self, client, school, headers):
        body = client.get("/auth/api/me", headers=headers(school.teacher_user)).get_json()
        assert body["teacher_id"] == school.teacher
        assert body["student_id"] is None

    def test_health(self, client, app):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok"}

    def test_unknown_route_is_json(self, client, app):
        resp = client.get("/nowhere")
        assert resp.status_code == 404
        assert "msg" in resp.get_json()
