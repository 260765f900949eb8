"""
Which homework a caller may see and manage, decided once per request.

`policy_for(user)` picks the policy from the caller's role; list and fetch
queries go through `scope`, mutations through `can_manage`.
"""
from __future__ import annotations

from sqlalchemy import and_, false, or_

from ..audience import Individual
from ..models import Homeworks, ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER


class VisibilityPolicy:
    def scope(self, query, filters: dict):
        raise NotImplementedError

    def can_view(self, homework) -> bool:
        raise NotImplementedError

    def can_manage(self, homework) -> bool:
        return False


class NoVisibility(VisibilityPolicy):
    """Callers without a usable profile see nothing."""

    def scope(self, query, filters):
        return query.filter(false())

    def can_view(self, homework):
        return False


class StudentVisibility(VisibilityPolicy):
    """Own individual homework plus class homework of the student's class. Filters are ignored."""

    def __init__(self, student):
        self.student = student

    def scope(self, query, filters):
        own = Homeworks.student_id == self.student.id
        if self.student.class_id is None:
            return query.filter(own)
        of_class = and_(Homeworks.class_id == self.student.class_id, Homeworks.student_id.is_(None))
        return query.filter(or_(own, of_class))

    def can_view(self, homework):
        audience = homework.audience
        if isinstance(audience, Individual):
            return audience.student_id == self.student.id
        return self.student.class_id is not None and audience.class_id == self.student.class_id


class TeacherVisibility(VisibilityPolicy):
    """Only the teacher's own homework, narrowed by student, subject and class."""

    FILTERS = ("student_id", "subject_id", "class_id")

    def __init__(self, teacher):
        self.teacher = teacher

    def scope(self, query, filters):
        query = query.filter(Homeworks.teacher_id == self.teacher.id)
        return _narrow(query, filters, self.FILTERS)

    def can_view(self, homework):
        return homework.teacher_id == self.teacher.id

    def can_manage(self, homework):
        return homework.teacher_id == self.teacher.id


class AdminVisibility(VisibilityPolicy):
    FILTERS = ("student_id", "teacher_id", "subject_id", "class_id")

    def scope(self, query, filters):
        return _narrow(query, filters, self.FILTERS)

    def can_view(self, homework):
        return True

    def can_manage(self, homework):
        return True


def _narrow(query, filters, allowed):
    for name in allowed:
        value = filters.get(name)
        if value is not None:
            query = query.filter(getattr(Homeworks, name) == value)
    return query


def policy_for(user) -> VisibilityPolicy:
    role = user.role_name
    if role == ROLE_ADMIN:
        return AdminVisibility()
    if role == ROLE_TEACHER and user.teacher_profile is not None:
        return TeacherVisibility(user.teacher_profile)
    if role == ROLE_STUDENT and user.student_profile is not None:
        return StudentVisibility(user.student_profile)
    return NoVisibility()
