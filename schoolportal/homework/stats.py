from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_

from ..audience import ClassWide
from ..errors import ValidationFailed
from ..models import HomeworkCompletions, Homeworks, StudentProfile


@dataclass
class StudentCompletion:
    student: StudentProfile
    completed: bool
    completed_at: Optional[datetime]


@dataclass
class CompletionReport:
    homework: Homeworks
    rows: List[StudentCompletion]

    @property
    def total(self) -> int:
        return len(self.rows)

    @property
    def completed_count(self) -> int:
        return sum(1 for r in self.rows if r.completed)

    @property
    def percentage(self) -> float:
        if not self.rows:
            return 0.0
        return round(self.completed_count * 100.0 / self.total, 1)


class CompletionStats:
    """Completion state of a class homework over the class's current roster."""

    def __init__(self, session):
        self.session = session

    def for_homework(self, hw: Homeworks) -> CompletionReport:
        audience = hw.audience
        if not isinstance(audience, ClassWide):
            raise ValidationFailed("Not a class assignment")

        rows = (
            self.session.query(StudentProfile, HomeworkCompletions)
            .outerjoin(
                HomeworkCompletions,
                and_(
                    HomeworkCompletions.student_id == StudentProfile.id,
                    HomeworkCompletions.homework_id == hw.id,
                ),
            )
            .filter(StudentProfile.class_id == audience.class_id)
            .order_by(StudentProfile.id.asc())
            .all()
        )
        return CompletionReport(
            homework=hw,
            rows=[
                StudentCompletion(
                    student=student,
                    completed=completion is not None,
                    completed_at=completion.completed_at if completion else None,
                )
                for student, completion in rows
            ],
        )
