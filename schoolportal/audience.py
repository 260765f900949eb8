"""Who a homework is for: one student or a whole class, never both."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .errors import ValidationFailed


@dataclass(frozen=True)
class Individual:
    student_id: int


@dataclass(frozen=True)
class ClassWide:
    class_id: int


Audience = Union[Individual, ClassWide]


def audience_from_ids(student_id: Optional[int], class_id: Optional[int]) -> Audience:
    if student_id is not None and class_id is not None:
        raise ValidationFailed(
            "A homework targets either a student or a class, not both.",
            errors={"student_id": ["Give student_id or class_id, not both."]},
        )
    if student_id is not None:
        return Individual(student_id)
    if class_id is not None:
        return ClassWide(class_id)
    raise ValidationFailed(
        "A homework needs a student or a class.",
        errors={"student_id": ["One of student_id or class_id is required."]},
    )
