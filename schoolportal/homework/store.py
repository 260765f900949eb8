import logging
from datetime import datetime

from ..audience import Audience, ClassWide, Individual
from ..errors import NotFoundError, PermissionDenied
from ..models import Classes, Homeworks, StudentProfile, Subjects, TeacherProfile

logger = logging.getLogger(__name__)


class HomeworkStore:
    """Homework rows. One row per homework, whatever the audience size."""

    def __init__(self, session):
        self.session = session

    def _require(self, model, ident, label):
        row = self.session.get(model, ident) if ident is not None else None
        if row is None:
            raise NotFoundError(f"{label} not found")
        return row

    def get(self, homework_id) -> Homeworks:
        return self._require(Homeworks, homework_id, "Homework")

    def get_visible(self, homework_id, policy) -> Homeworks:
        hw = self.get(homework_id)
        if not policy.can_view(hw):
            raise NotFoundError("Homework not found")
        return hw

    def get_managed(self, homework_id, policy) -> Homeworks:
        hw = self.get(homework_id)
        if not policy.can_manage(hw):
            raise PermissionDenied("You cannot manage this homework")
        return hw

    def create(self, *, subject_id, teacher_id, title, description, due_date,
               audience: Audience, attachments=None) -> Homeworks:
        subject = self._require(Subjects, subject_id, "Subject")
        self._require(TeacherProfile, teacher_id, "Teacher")
        hw = Homeworks(
            subject_id=subject.id,
            teacher_id=teacher_id,
            title=title,
            description=description,
            due_date=due_date,
        )
        if isinstance(audience, ClassWide):
            hw.class_id = self._require(Classes, audience.class_id, "Class").id
        elif isinstance(audience, Individual):
            hw.student_id = self._require(StudentProfile, audience.student_id, "Student").id
        hw.attachment_list = attachments or []
        self.session.add(hw)
        self.session.commit()
        logger.info("Homework %s created for %s", hw.id, audience)
        return hw

    def list(self, policy, filters=None):
        q = policy.scope(self.session.query(Homeworks), filters or {})
        return q.order_by(Homeworks.due_date.asc(), Homeworks.id.asc()).all()

    def update(self, hw: Homeworks, changes: dict) -> Homeworks:
        for name in ("title", "description", "due_date"):
            if name in changes:
                setattr(hw, name, changes[name])
        if "completed" in changes:
            hw.completed = bool(changes["completed"])
            hw.completed_at = datetime.utcnow() if hw.completed else None
        self.session.commit()
        return hw

    def delete(self, hw: Homeworks) -> None:
        hw_id = hw.id
        self.session.delete(hw)
        self.session.commit()
        logger.info("Homework %s deleted", hw_id)
