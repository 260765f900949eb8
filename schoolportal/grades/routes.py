from datetime import datetime

from flask import jsonify, request
from flask_jwt_extended import current_user, jwt_required

from . import grades_bp
from ..activity_log import log_activity
from ..auth.decorators import roles_required
from ..errors import NotFoundError, PermissionDenied
from ..forms import GradeForm, GradeUpdateForm, bind_json, provided
from ..models import db, Grades, StudentProfile, Subjects, ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER
from ..notifications.emitter import notify_grade_added, notify_grade_updated
from ..serializers import grade_json


def _get_grade_or_404(grade_id):
    g = db.session.get(Grades, grade_id)
    if g is None:
        raise NotFoundError("Grade not found")
    return g


def _require_author(grade):
    """Only the teacher who gave the grade, or an admin, may change it."""
    if current_user.role_name == ROLE_ADMIN:
        return
    teacher = current_user.teacher_profile
    if teacher is None or grade.teacher_id != teacher.id:
        raise PermissionDenied("You cannot change this grade")


@grades_bp.get("")
@jwt_required()
def list_grades():
    q = Grades.query
    if current_user.role_name == ROLE_STUDENT:
        # students only ever see their own grades
        student = current_user.student_profile
        q = q.filter(Grades.student_id == (student.id if student else None))
    for name in ("student_id", "subject_id", "teacher_id"):
        value = request.args.get(name, type=int)
        if value is not None:
            q = q.filter(getattr(Grades, name) == value)
    grades = q.order_by(Grades.date.desc(), Grades.id.desc()).all()
    return jsonify(grades=[grade_json(g) for g in grades])


@grades_bp.post("")
@roles_required(ROLE_TEACHER, ROLE_ADMIN)
def create_grade():
    form = bind_json(GradeForm)

    teacher = current_user.teacher_profile
    if teacher is None:
        raise PermissionDenied("Only teachers can give grades")
    if db.session.get(StudentProfile, form.student_id.data) is None:
        raise NotFoundError("Student not found")
    subject = db.session.get(Subjects, form.subject_id.data)
    if subject is None:
        raise NotFoundError("Subject not found")
    if subject.teacher_id != teacher.id:
        raise PermissionDenied("You cannot grade this subject")

    g = Grades(
        student_id=form.student_id.data,
        subject_id=subject.id,
        teacher_id=teacher.id,
        value=form.value.data,
        comment=form.comment.data or None,
        date=form.date.data or datetime.utcnow(),
    )
    db.session.add(g)
    db.session.commit()
    grade_id, student_id, value, subject_name = g.id, g.student_id, g.value, subject.name

    notify_grade_added(db.session, student_id, value, subject_name)
    log_activity(db.session, current_user.id, "create", "grade", grade_id, {
        "student_id": student_id,
        "subject_id": subject.id,
        "value": value,
        "subject_name": subject_name,
    }, request)
    return jsonify(msg="Grade created", grade=grade_json(g)), 201


@grades_bp.put("/<int:grade_id>")
@roles_required(ROLE_TEACHER, ROLE_ADMIN)
def update_grade(grade_id):
    g = _get_grade_or_404(grade_id)
    _require_author(g)
    form = bind_json(GradeUpdateForm)
    changes = provided(form, "value", "comment", "date")
    for name, value in changes.items():
        setattr(g, name, value)
    db.session.commit()

    if "value" in changes:
        notify_grade_updated(db.session, g.student_id, g.value, g.subject.name)
    log_activity(db.session, current_user.id, "update", "grade", g.id,
                 {"fields": sorted(changes), "value": g.value}, request)
    return jsonify(msg="Grade updated", grade=grade_json(g))


@grades_bp.delete("/<int:grade_id>")
@roles_required(ROLE_TEACHER, ROLE_ADMIN)
def delete_grade(grade_id):
    g = _get_grade_or_404(grade_id)
    _require_author(g)
    details = {"student_id": g.student_id, "value": g.value}
    db.session.delete(g)
    db.session.commit()
    log_activity(db.session, current_user.id, "delete", "grade", grade_id, details, request)
    return jsonify(msg="Grade deleted")
