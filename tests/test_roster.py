"""
Tests for the class, subject, teacher and student directory endpoints.
"""

from __future__ import annotations

from schoolportal import db
from schoolportal.models import ActivityLogs, StudentProfile


class TestClasses:

    def test_list_with_roster(self, client, school, headers):
        resp = client.get("/classes", headers=headers(school.teacher_user))
        assert resp.status_code == 200
        classes = resp.get_json()["classes"]
        assert [c["name"] for c in classes] == ["7A", "7B"]
        a = classes[0]
        assert a["student_count"] == 3
        assert [s["id"] for s in a["students"]] == [school.s1, school.s2, school.s3]
        assert a["class_teacher"]["id"] == school.teacher
        assert classes[1]["class_teacher"] is None

    def test_get(self, client, school, headers):
        resp = client.get(f"/classes/{school.class_b}", headers=headers(school.s4_user))
        assert resp.status_code == 200
        c = resp.get_json()["class"]
        assert c["name"] == "7B"
        assert [s["name"] for s in c["students"]] == ["Student 4"]

    def test_missing(self, client, school, headers):
        assert client.get("/classes/999", headers=headers(school.admin_user)).status_code == 404

    def test_requires_token(self, client, school):
        assert client.get("/classes").status_code == 401


class TestSubjectsAndTeachers:

    def test_subjects(self, client, school, headers):
        subjects = client.get("/subjects", headers=headers(school.teacher_user)).get_json()["subjects"]
        assert [(s["name"], s["teacher_id"]) for s in subjects] == [
            ("Mathematics", school.teacher), ("Physics", school.teacher2),
        ]

    def test_teachers(self, client, school, headers):
        teachers = client.get("/teachers", headers=headers(school.admin_user)).get_json()["teachers"]
        assert [t["id"] for t in teachers] == [school.teacher, school.teacher2]
        assert teachers[0]["name"] == "Teacher One"


class TestStudents:

    def test_list(self, client, school, headers):
        students = client.get("/students", headers=headers(school.teacher_user)).get_json()["students"]
        assert [s["id"] for s in students] == [school.s1, school.s2, school.s3, school.s4]

    def test_list_by_class(self, client, school, headers):
        students = client.get(f"/students?class_id={school.class_b}",
                              headers=headers(school.teacher_user)).get_json()["students"]
        assert [s["id"] for s in students] == [school.s4]

    def test_get(self, client, school, headers):
        resp = client.get(f"/students/{school.s2}", headers=headers(school.teacher_user))
        assert resp.get_json()["student"]["class"]["id"] == school.class_a
        assert client.get("/students/999", headers=headers(school.teacher_user)).status_code == 404

    def test_move_to_other_class(self, client, school, headers):
        resp = client.put(f"/students/{school.s1}", json={"class_id": school.class_b, "student_number": "B7"},
                          headers=headers(school.admin_user))
        assert resp.status_code == 200
        body = resp.get_json()["student"]
        assert body["class"]["id"] == school.class_b
        assert body["student_number"] == "B7"

        roster = client.get(f"/classes/{school.class_b}", headers=headers(school.admin_user)).get_json()
        assert [s["id"] for s in roster["class"]["students"]] == [school.s1, school.s4]

        log = ActivityLogs.query.filter_by(entity="student").one()
        assert log.entity_id == str(school.s1)
        assert f'"from_class_id": {school.class_a}' in log.details

    def test_move_sees_new_class_homework(self, client, school, headers, make_homework):
        make_homework(title="For 7B", class_id=school.class_b)
        client.put(f"/students/{school.s1}", json={"class_id": school.class_b},
                   headers=headers(school.teacher_user))
        titles = [hw["title"] for hw in
                  client.get("/homeworks", headers=headers(school.s1_user)).get_json()["homeworks"]]
        assert titles == ["For 7B"]

    def test_unknown_class(self, client, school, headers):
        resp = client.put(f"/students/{school.s1}", json={"class_id": 999},
                          headers=headers(school.teacher_user))
        assert resp.status_code == 404
        assert db.session.get(StudentProfile, school.s1).class_id == school.class_a

    def test_class_id_type(self, client, school, headers):
        resp = client.put(f"/students/{school.s1}", json={"class_id": "7B"},
                          headers=headers(school.teacher_user))
        assert resp.status_code == 400

    def test_student_cannot_update(self, client, school, headers):
        resp = client.put(f"/students/{school.s1}", json={"class_id": school.class_b},
                          headers=headers(school.s1_user))
        assert resp.status_code == 403
