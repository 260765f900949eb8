"""
Tests for homework audiences and the single-audience rule in the schema.
"""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from schoolportal import db
from schoolportal.audience import ClassWide, Individual, audience_from_ids
from schoolportal.errors import ValidationFailed
from schoolportal.models import Homeworks


class TestAudienceFromIds:

    def test_student(self):
        assert audience_from_ids(7, None) == Individual(7)

    def test_class(self):
        assert audience_from_ids(None, 3) == ClassWide(3)

    def test_both(self):
        with pytest.raises(ValidationFailed) as exc:
            audience_from_ids(7, 3)
        assert exc.value.status_code == 400
        assert "student_id" in exc.value.errors

    def test_neither(self):
        with pytest.raises(ValidationFailed):
            audience_from_ids(None, None)

    def test_zero_is_an_id(self):
        assert audience_from_ids(0, None) == Individual(0)


class TestHomeworkAudience:

    def test_property(self):
        assert Homeworks(student_id=4).audience == Individual(4)
        assert Homeworks(class_id=2).audience == ClassWide(2)

    def test_property_without_audience(self):
        with pytest.raises(ValueError):
            Homeworks().audience

    def test_schema_rejects_both(self, school):
        db.session.add(Homeworks(
            subject_id=school.math, teacher_id=school.teacher,
            student_id=school.s1, class_id=school.class_a,
            title="Broken", description="D", due_date=datetime(2026, 11, 1),
        ))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    def test_schema_rejects_neither(self, school):
        db.session.add(Homeworks(
            subject_id=school.math, teacher_id=school.teacher,
            title="Broken", description="D", due_date=datetime(2026, 11, 1),
        ))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()


class TestAttachmentList:

    def test_empty_list_stored_as_null(self):
        hw = Homeworks()
        hw.attachment_list = []
        assert hw.attachments is None
        assert hw.attachment_list == []

    def test_round_trip(self):
        hw = Homeworks()
        hw.attachment_list = ["https://a.example/1", "https://a.example/2"]
        assert hw.attachment_list == ["https://a.example/1", "https://a.example/2"]

    @pytest.mark.parametrize("raw", ["{oops", '{"a": 1}', '"just a string"', ""])
    def test_unreadable_values(self, raw):
        assert Homeworks(attachments=raw).attachment_list == []
