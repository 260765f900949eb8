import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from ..audience import ClassWide, Individual
from ..errors import ConflictError, NotFoundError, PermissionDenied
from ..models import HomeworkCompletions, Homeworks

logger = logging.getLogger(__name__)

ALREADY_COMPLETED = "Homework already marked as completed"


class CompletionTracker:
    """Marks homework done for the calling student."""

    def __init__(self, session):
        self.session = session

    def mark_completed(self, homework_id, user) -> Homeworks:
        hw = self.session.get(Homeworks, homework_id)
        if hw is None:
            raise NotFoundError("Homework not found")

        student = user.student_profile
        if student is None:
            raise PermissionDenied("Only students can mark homework as completed")

        audience = hw.audience
        if isinstance(audience, ClassWide):
            if student.class_id != audience.class_id:
                raise PermissionDenied("No access to this assignment")
            self._insert_completion(hw, student)
        elif isinstance(audience, Individual) and audience.student_id == student.id:
            hw.completed = True
            hw.completed_at = datetime.utcnow()
            self.session.commit()
        else:
            raise PermissionDenied("No access to this assignment")

        logger.info("Homework %s completed by student %s", hw.id, student.id)
        self.session.refresh(hw)
        return hw

    def _find_completion(self, hw, student):
        return (self.session.query(HomeworkCompletions)
                .filter_by(homework_id=hw.id, student_id=student.id)
                .first())

    def _insert_completion(self, hw, student):
        if self._find_completion(hw, student) is not None:
            raise ConflictError(ALREADY_COMPLETED)
        self.session.add(HomeworkCompletions(homework_id=hw.id, student_id=student.id))
        try:
            self.session.commit()
        except IntegrityError:
            # lost the race against a concurrent insert for the same pair
            self.session.rollback()
            logger.info("Duplicate completion of homework %s by student %s", hw.id, student.id)
            raise ConflictError(ALREADY_COMPLETED)
