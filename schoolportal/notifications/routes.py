from flask import jsonify
from flask_jwt_extended import current_user, jwt_required

from . import notifications_bp
from ..errors import NotFoundError
from ..models import db, Notifications
from ..serializers import notification_json

RECENT_LIMIT = 50


def _own_notification_or_404(notification_id):
    n = Notifications.query.filter_by(id=notification_id, user_id=current_user.id).first()
    if n is None:
        raise NotFoundError("Notification not found")
    return n


@notifications_bp.get("")
@jwt_required()
def my_notifications():
    rows = (Notifications.query
            .filter_by(user_id=current_user.id)
            .order_by(Notifications.created_at.desc(), Notifications.id.desc())
            .limit(RECENT_LIMIT)
            .all())
    return jsonify(notifications=[notification_json(n) for n in rows])


@notifications_bp.get("/unread-count")
@jwt_required()
def unread_count():
    count = Notifications.query.filter_by(user_id=current_user.id, read=False).count()
    return jsonify(count=count)


@notifications_bp.put("/mark-all-read")
@jwt_required()
def mark_all_read():
    (Notifications.query
     .filter_by(user_id=current_user.id, read=False)
     .update({Notifications.read: True}, synchronize_session=False))
    db.session.commit()
    return jsonify(msg="All notifications marked as read")


@notifications_bp.put("/<int:notification_id>/read")
@jwt_required()
def mark_read(notification_id):
    n = _own_notification_or_404(notification_id)
    n.read = True
    db.session.commit()
    return jsonify(msg="Notification marked as read", notification=notification_json(n))


@notifications_bp.delete("/<int:notification_id>")
@jwt_required()
def delete_notification(notification_id):
    n = _own_notification_or_404(notification_id)
    db.session.delete(n)
    db.session.commit()
    return jsonify(msg="Notification deleted")
