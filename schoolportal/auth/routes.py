import logging

from flask import jsonify
from flask_jwt_extended import create_access_token, jwt_required, get_jwt, current_user

from . import auth_bp
from ..errors import ConflictError
from ..forms import LoginForm, RegisterForm, bind_json
from ..models import db, Users, ROLE_STUDENT

logger = logging.getLogger(__name__)


def _issue_token(user):
    # identity as string; metadata in additional_claims
    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role_name, "name": user.name}
    )


@auth_bp.route("/api/register", methods=["POST"])
def api_register():
    form = bind_json(RegisterForm)
    email = form.email.data.strip().lower()
    if Users.query.filter_by(email=email).first():
        raise ConflictError("That email is already registered.")

    # self sign-up is always a student; staff accounts come from the seed or an admin
    user = Users(name=form.name.data.strip(), email=email, role=ROLE_STUDENT)
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    logger.info("Registered user %s", user.id)
    return jsonify(access_token=_issue_token(user), user_id=user.id), 201


@auth_bp.route("/api/login", methods=["POST"])
def api_login():
    form = bind_json(LoginForm)
    email = (form.email.data or "").strip().lower()
    user = Users.query.filter_by(email=email).first()
    if not user or not user.check_password(form.password.data):
        return jsonify({"msg": "invalid credentials"}), 401
    return jsonify(access_token=_issue_token(user))


@auth_bp.route("/api/me")
@jwt_required()
def api_me():
    claims = get_jwt()
    student = current_user.student_profile
    teacher = current_user.teacher_profile
    return jsonify(
        id=current_user.id,
        email=current_user.email,
        role=current_user.role_name,
        name=claims.get("name", current_user.name),
        student_id=student.id if student else None,
        class_id=student.class_id if student else None,
        teacher_id=teacher.id if teacher else None,
    )
