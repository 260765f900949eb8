from flask import jsonify, request
from flask_jwt_extended import current_user, jwt_required

from . import homework_bp
from .completion import CompletionTracker
from .stats import CompletionStats
from .store import HomeworkStore
from .visibility import policy_for
from ..activity_log import log_activity
from ..audience import audience_from_ids
from ..auth.decorators import roles_required
from ..errors import PermissionDenied
from ..forms import HomeworkForm, HomeworkUpdateForm, bind_json, provided
from ..models import db, ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER
from ..serializers import class_brief, homework_json, iso, student_brief


def _store():
    return HomeworkStore(db.session)


@homework_bp.get("")
@jwt_required()
def list_homeworks():
    filters = {
        name: request.args.get(name, type=int)
        for name in ("student_id", "teacher_id", "subject_id", "class_id")
    }
    homeworks = _store().list(policy_for(current_user), filters)
    return jsonify(homeworks=[homework_json(hw) for hw in homeworks])


@homework_bp.get("/<int:homework_id>")
@jwt_required()
def get_homework(homework_id):
    hw = _store().get_visible(homework_id, policy_for(current_user))
    return jsonify(homework=homework_json(hw))


@homework_bp.post("")
@roles_required(ROLE_TEACHER, ROLE_ADMIN)
def create_homework():
    form = bind_json(HomeworkForm)
    audience = audience_from_ids(form.student_id.data, form.class_id.data)

    if current_user.role_name == ROLE_TEACHER:
        own = current_user.teacher_profile
        if own is None or own.id != form.teacher_id.data:
            raise PermissionDenied("Teachers can only assign homework as themselves")

    hw = _store().create(
        subject_id=form.subject_id.data,
        teacher_id=form.teacher_id.data,
        title=form.title.data.strip(),
        description=form.description.data,
        due_date=form.due_date.data,
        audience=audience,
        attachments=form.attachments.data,
    )
    log_activity(db.session, current_user.id, "create", "homework", hw.id,
                 {"title": hw.title, "subject": hw.subject.name}, request)
    return jsonify(msg="Homework created", homework=homework_json(hw)), 201


@homework_bp.put("/<int:homework_id>")
@roles_required(ROLE_TEACHER, ROLE_ADMIN)
def update_homework(homework_id):
    store = _store()
    hw = store.get_managed(homework_id, policy_for(current_user))
    form = bind_json(HomeworkUpdateForm)
    changes = provided(form, "title", "description", "due_date", "completed")
    hw = store.update(hw, changes)
    log_activity(db.session, current_user.id, "update", "homework", hw.id,
                 {"title": hw.title, "fields": sorted(changes)}, request)
    return jsonify(msg="Homework updated", homework=homework_json(hw))


@homework_bp.patch("/<int:homework_id>/complete")
@roles_required(ROLE_STUDENT, ROLE_TEACHER, ROLE_ADMIN)
def complete_homework(homework_id):
    hw = CompletionTracker(db.session).mark_completed(homework_id, current_user)
    return jsonify(msg="Homework marked as completed", homework=homework_json(hw))


@homework_bp.get("/<int:homework_id>/completion-stats")
@roles_required(ROLE_TEACHER, ROLE_ADMIN)
def completion_stats(homework_id):
    hw = _store().get_managed(homework_id, policy_for(current_user))
    report = CompletionStats(db.session).for_homework(hw)
    return jsonify(
        homework={"id": hw.id, "title": hw.title, "class": class_brief(hw.school_class)},
        students=[
            {
                "student": student_brief(row.student),
                "completed": row.completed,
                "completed_at": iso(row.completed_at),
            }
            for row in report.rows
        ],
        total=report.total,
        completed_count=report.completed_count,
        percentage=report.percentage,
    )


@homework_bp.delete("/<int:homework_id>")
@roles_required(ROLE_TEACHER, ROLE_ADMIN)
def delete_homework(homework_id):
    store = _store()
    hw = store.get_managed(homework_id, policy_for(current_user))
    title = hw.title
    store.delete(hw)
    log_activity(db.session, current_user.id, "delete", "homework", homework_id,
                 {"title": title}, request)
    return jsonify(msg="Homework deleted")
