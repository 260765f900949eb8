"""Plain-dict views of the models for JSON responses."""


def iso(dt):
    return dt.isoformat(timespec="seconds") if dt else None


def user_brief(user):
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role_name}


def class_brief(c):
    if c is None:
        return None
    return {"id": c.id, "name": c.name, "grade": c.grade}


def class_json(c):
    d = class_brief(c)
    d.update({
        "description": c.description,
        "class_teacher_id": c.class_teacher_id,
        "student_count": len(c.students),
    })
    return d


def class_roster_json(c):
    d = class_json(c)
    d["class_teacher"] = teacher_brief(c.class_teacher)
    d["students"] = [
        {"id": s.id, "user_id": s.user_id, "name": s.user.name if s.user else None,
         "student_number": s.student_number}
        for s in c.students
    ]
    return d


def student_brief(s):
    if s is None:
        return None
    return {
        "id": s.id,
        "user_id": s.user_id,
        "name": s.user.name if s.user else None,
        "student_number": s.student_number,
        "class": class_brief(s.school_class),
    }


def teacher_brief(t):
    if t is None:
        return None
    return {
        "id": t.id,
        "user_id": t.user_id,
        "name": t.user.name if t.user else None,
        "specialization": t.specialization,
    }


def subject_json(s):
    if s is None:
        return None
    return {"id": s.id, "name": s.name, "description": s.description, "teacher_id": s.teacher_id}


def completion_json(c):
    return {
        "id": c.id,
        "student": student_brief(c.student),
        "completed_at": iso(c.completed_at),
    }


def homework_json(hw):
    return {
        "id": hw.id,
        "title": hw.title,
        "description": hw.description,
        "due_date": iso(hw.due_date),
        "attachments": hw.attachment_list,
        "completed": bool(hw.completed),
        "completed_at": iso(hw.completed_at),
        "subject_id": hw.subject_id,
        "teacher_id": hw.teacher_id,
        "student_id": hw.student_id,
        "class_id": hw.class_id,
        "subject": subject_json(hw.subject),
        "teacher": teacher_brief(hw.teacher),
        "student": student_brief(hw.student),
        "class": class_brief(hw.school_class),
        "created_at": iso(hw.created_at),
        "updated_at": iso(hw.updated_at),
        "completions": [completion_json(c) for c in hw.completions],
    }


def grade_json(g):
    return {
        "id": g.id,
        "value": g.value,
        "comment": g.comment,
        "date": iso(g.date),
        "student": student_brief(g.student),
        "subject": subject_json(g.subject),
        "teacher": teacher_brief(g.teacher),
    }


def notification_json(n):
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "read": bool(n.read),
        "created_at": iso(n.created_at),
    }
