"""
Fire-and-forget notifications for grade and profile events.

Every function here swallows database errors after logging them: a failed
notification must never undo the grade or profile change that triggered it.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from ..models import Notifications, StudentProfile

logger = logging.getLogger(__name__)

GRADE_ADDED = "grade_added"
GRADE_UPDATED = "grade_updated"
PROFILE_CREATED = "profile_created"


def create_notification(session, user_id, type_, title, message):
    try:
        n = Notifications(user_id=user_id, type=type_, title=title, message=message)
        session.add(n)
        session.commit()
        return n
    except SQLAlchemyError:
        logger.exception("Could not create %s notification for user %s", type_, user_id)
        session.rollback()
        return None


def _student_user_id(session, student_id):
    try:
        student = session.get(StudentProfile, student_id)
    except SQLAlchemyError:
        logger.exception("Could not load student %s for notification", student_id)
        session.rollback()
        return None
    return student.user_id if student else None


def notify_grade_added(session, student_id, value, subject_name):
    user_id = _student_user_id(session, student_id)
    if user_id is None:
        return None
    return create_notification(
        session, user_id, GRADE_ADDED,
        "New grade",
        f'You received a {value} in "{subject_name}"',
    )


def notify_grade_updated(session, student_id, value, subject_name):
    user_id = _student_user_id(session, student_id)
    if user_id is None:
        return None
    return create_notification(
        session, user_id, GRADE_UPDATED,
        "Grade changed",
        f'Your grade in "{subject_name}" was changed to {value}',
    )


def notify_profile_created(session, user_id, profile_type):
    label = "student" if profile_type == "student" else "teacher"
    return create_notification(
        session, user_id, PROFILE_CREATED,
        "Profile created",
        f"Your {label} profile has been created",
    )
