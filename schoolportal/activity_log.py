"""Audit trail of create/update/delete actions. Writing it never breaks a request."""
import json
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from .models import ActivityLogs

logger = logging.getLogger(__name__)


def log_activity(session, user_id, action, entity, entity_id=None, details=None, req=None):
    rec = ActivityLogs(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=json.dumps(details, default=str) if details else None,
    )
    if req is not None:
        rec.ip_address = req.headers.get("X-Forwarded-For", req.remote_addr)
        rec.user_agent = (req.headers.get("User-Agent") or "")[:255] or None
    try:
        session.add(rec)
        session.commit()
    except SQLAlchemyError:
        logger.exception("Could not write activity log (%s %s %s)", action, entity, entity_id)
        session.rollback()
        return None
    return rec


def get_activity_logs(session, user_id=None, entity=None, action=None,
                      start_date: datetime = None, end_date: datetime = None, limit=100):
    q = session.query(ActivityLogs)
    if user_id:
        q = q.filter(ActivityLogs.user_id == user_id)
    if entity:
        q = q.filter(ActivityLogs.entity == entity)
    if action:
        q = q.filter(ActivityLogs.action == action)
    if start_date:
        q = q.filter(ActivityLogs.created_at >= start_date)
    if end_date:
        q = q.filter(ActivityLogs.created_at <= end_date)
    return q.order_by(ActivityLogs.created_at.desc(), ActivityLogs.id.desc()).limit(limit).all()


def parse_details(log):
    if not log.details:
        return None
    try:
        return json.loads(log.details)
    except ValueError:
        return None
