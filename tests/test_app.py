"""
Tests for the app shell: seed command, logging formatter and configuration.
"""

from __future__ import annotations

import json
import logging
import sys

from schoolportal import config as config_module
from schoolportal.logging_config import JSONFormatter
from schoolportal.models import Homeworks, StudentProfile, Users


class TestSeedCommand:

    def test_seed(self, app):
        result = app.test_cli_runner().invoke(args=["seed"])
        assert result.exit_code == 0, result.output
        assert "Seed loaded." in result.output

        assert Users.query.filter_by(email="admin@school.local").one().role == "admin"
        assert StudentProfile.query.count() == 3
        homeworks = Homeworks.query.order_by(Homeworks.id).all()
        assert [hw.audience.__class__.__name__ for hw in homeworks] == ["ClassWide", "Individual"]
        assert homeworks[0].attachment_list == ["https://example.com/fractions.pdf"]

    def test_seed_twice(self, app):
        runner = app.test_cli_runner()
        runner.invoke(args=["seed"])
        users = Users.query.count()
        runner.invoke(args=["seed"])
        assert Users.query.count() == users
        assert Homeworks.query.count() == 2

    def test_seeded_student_can_log_in(self, app, client):
        app.test_cli_runner().invoke(args=["seed"])
        resp = client.post("/auth/api/login", json={"email": "anna@school.local", "password": "student123"})
        assert resp.status_code == 200
        token = resp.get_json()["access_token"]
        listed = client.get("/homeworks", headers={"Authorization": f"Bearer {token}"}).get_json()
        assert len(listed["homeworks"]) == 2


class TestJSONFormatter:

    def test_format(self):
        record = logging.LogRecord("schoolportal.test", logging.WARNING, __file__, 1,
                                   "hello %s", ("world",), None)
        record.request_id = "abc123"
        entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "schoolportal.test"
        assert entry["msg"] == "hello world"
        assert entry["request_id"] == "abc123"

    def test_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        entry = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in entry["exc"]


class TestRequestId:

    def test_generated(self, client):
        resp = client.get("/health")
        assert len(resp.headers["X-Request-ID"]) == 12

    def test_forwarded(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "edge-42"})
        assert resp.headers["X-Request-ID"] == "edge-42"


class TestConfig:

    def test_heroku_style_url(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db:5432/school")
        assert config_module._db_url() == "postgresql://u:p@db:5432/school"

    def test_plain_url_untouched(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///school.db")
        assert config_module._db_url() == "sqlite:///school.db"
