from datetime import datetime

from flask import jsonify, request
from flask_jwt_extended import current_user, verify_jwt_in_request

from . import admin_bp
from ..activity_log import get_activity_logs, log_activity, parse_details
from ..errors import ConflictError, NotFoundError, PermissionDenied, ValidationFailed
from ..forms import ClassForm, StudentProfileForm, SubjectForm, TeacherProfileForm, bind_json
from ..models import (
    db, Classes, StudentProfile, Subjects, TeacherProfile, Users,
    ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER,
)
from ..notifications.emitter import notify_profile_created
from ..serializers import class_json, iso, student_brief, subject_json, teacher_brief, user_brief


# Helpers
def is_admin() -> bool:
    return current_user.role_name == ROLE_ADMIN


def _require(model, ident, label):
    row = db.session.get(model, ident) if ident is not None else None
    if row is None:
        raise NotFoundError(f"{label} not found")
    return row


def _profile_user(user_id, role):
    user = _require(Users, user_id, "User")
    if user.role_name != role:
        raise ValidationFailed(f"User must have the {role} role")
    return user


def _parse_date(raw):
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationFailed(f"Invalid date: {raw}")


# Guards
@admin_bp.before_request
def guard():
    verify_jwt_in_request()
    if not is_admin():
        raise PermissionDenied("Admin access required")


# Classes
@admin_bp.post("/classes")
def create_class():
    form = bind_json(ClassForm)
    if form.class_teacher_id.data is not None:
        _require(TeacherProfile, form.class_teacher_id.data, "Teacher")
    c = Classes(
        name=form.name.data.strip(),
        grade=form.grade.data,
        description=form.description.data or None,
        class_teacher_id=form.class_teacher_id.data,
    )
    db.session.add(c)
    db.session.commit()
    log_activity(db.session, current_user.id, "create", "class", c.id, {"name": c.name}, request)
    return jsonify(msg="Class created", **{"class": class_json(c)}), 201


# Subjects
@admin_bp.post("/subjects")
def create_subject():
    form = bind_json(SubjectForm)
    name = form.name.data.strip()
    if Subjects.query.filter_by(name=name).first():
        raise ConflictError("A subject with that name already exists")
    if form.teacher_id.data is not None:
        _require(TeacherProfile, form.teacher_id.data, "Teacher")
    s = Subjects(name=name, description=form.description.data or None, teacher_id=form.teacher_id.data)
    db.session.add(s)
    db.session.commit()
    log_activity(db.session, current_user.id, "create", "subject", s.id, {"name": s.name}, request)
    return jsonify(msg="Subject created", subject=subject_json(s)), 201


# Profiles
@admin_bp.post("/students")
def create_student_profile():
    form = bind_json(StudentProfileForm)
    user = _profile_user(form.user_id.data, ROLE_STUDENT)
    _require(Classes, form.class_id.data, "Class")
    if user.student_profile is not None:
        raise ConflictError("This user already has a student profile")
    sp = StudentProfile(
        user_id=user.id,
        class_id=form.class_id.data,
        student_number=form.student_number.data or None,
    )
    db.session.add(sp)
    db.session.commit()
    notify_profile_created(db.session, user.id, "student")
    log_activity(db.session, current_user.id, "create", "student", sp.id, {"user_id": user.id}, request)
    return jsonify(msg="Student profile created", student=student_brief(sp)), 201


@admin_bp.post("/teachers")
def create_teacher_profile():
    form = bind_json(TeacherProfileForm)
    user = _profile_user(form.user_id.data, ROLE_TEACHER)
    if user.teacher_profile is not None:
        raise ConflictError("This user already has a teacher profile")
    tp = TeacherProfile(user_id=user.id, specialization=form.specialization.data or None)
    db.session.add(tp)
    db.session.commit()
    notify_profile_created(db.session, user.id, "teacher")
    log_activity(db.session, current_user.id, "create", "teacher", tp.id, {"user_id": user.id}, request)
    return jsonify(msg="Teacher profile created", teacher=teacher_brief(tp)), 201


# Activity log
@admin_bp.get("/activity-logs")
def activity_logs():
    logs = get_activity_logs(
        db.session,
        user_id=request.args.get("user_id", type=int),
        entity=request.args.get("entity"),
        action=request.args.get("action"),
        start_date=_parse_date(request.args.get("start_date")),
        end_date=_parse_date(request.args.get("end_date")),
        limit=request.args.get("limit", default=100, type=int),
    )
    return jsonify(logs=[
        {
            "id": log.id,
            "action": log.action,
            "entity": log.entity,
            "entity_id": log.entity_id,
            "details": parse_details(log),
            "ip_address": log.ip_address,
            "user_agent": log.user_agent,
            "user": user_brief(log.user),
            "created_at": iso(log.created_at),
        }
        for log in logs
    ])
