from flask import jsonify, request
from flask_jwt_extended import current_user, jwt_required

from . import roster_bp
from ..activity_log import log_activity
from ..auth.decorators import roles_required
from ..errors import NotFoundError
from ..forms import StudentUpdateForm, bind_json, provided
from ..models import db, Classes, StudentProfile, Subjects, TeacherProfile, ROLE_ADMIN, ROLE_TEACHER
from ..serializers import class_roster_json, student_brief, subject_json, teacher_brief


def _get_or_404(model, ident, label):
    row = db.session.get(model, ident)
    if row is None:
        raise NotFoundError(f"{label} not found")
    return row


# Classes
@roster_bp.get("/classes")
@jwt_required()
def list_classes():
    classes = Classes.query.order_by(Classes.grade.asc(), Classes.name.asc()).all()
    return jsonify(classes=[class_roster_json(c) for c in classes])


@roster_bp.get("/classes/<int:class_id>")
@jwt_required()
def get_class(class_id):
    c = _get_or_404(Classes, class_id, "Class")
    return jsonify(**{"class": class_roster_json(c)})


# Subjects and teachers
@roster_bp.get("/subjects")
@jwt_required()
def list_subjects():
    subjects = Subjects.query.order_by(Subjects.name.asc()).all()
    return jsonify(subjects=[subject_json(s) for s in subjects])


@roster_bp.get("/teachers")
@jwt_required()
def list_teachers():
    teachers = TeacherProfile.query.order_by(TeacherProfile.id.asc()).all()
    return jsonify(teachers=[teacher_brief(t) for t in teachers])


# Students
@roster_bp.get("/students")
@jwt_required()
def list_students():
    q = StudentProfile.query
    class_id = request.args.get("class_id", type=int)
    if class_id is not None:
        q = q.filter(StudentProfile.class_id == class_id)
    students = q.order_by(StudentProfile.id.asc()).all()
    return jsonify(students=[student_brief(s) for s in students])


@roster_bp.get("/students/<int:student_id>")
@jwt_required()
def get_student(student_id):
    return jsonify(student=student_brief(_get_or_404(StudentProfile, student_id, "Student")))


@roster_bp.put("/students/<int:student_id>")
@roles_required(ROLE_TEACHER, ROLE_ADMIN)
def update_student(student_id):
    """Move a student to another class and/or renumber them."""
    sp = _get_or_404(StudentProfile, student_id, "Student")
    form = bind_json(StudentUpdateForm)
    changes = provided(form, "class_id", "student_number")
    if "class_id" in changes:
        _get_or_404(Classes, changes["class_id"], "Class")
    previous_class = sp.class_id
    for name, value in changes.items():
        setattr(sp, name, value)
    db.session.commit()
    log_activity(db.session, current_user.id, "update", "student", sp.id, {
        "fields": sorted(changes),
        "from_class_id": previous_class,
        "class_id": sp.class_id,
    }, request)
    return jsonify(msg="Student updated", student=student_brief(sp))
