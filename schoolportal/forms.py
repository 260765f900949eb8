import re

from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import (
    StringField, PasswordField, IntegerField, DateTimeField, BooleanField, Field,
)
from wtforms.validators import (
    DataRequired, InputRequired, Optional, Email, Length, NumberRange, Regexp, ValidationError,
)

from .errors import ValidationFailed

# Email() only for sign-up.
EMAIL_DEV = Email(check_deliverability=False)

NAME_RE = r"^[A-Za-zÁÉÍÓÚáéíóúÑñ' -]{2,60}$"  # letters, spaces, apostrophe and hyphen
URL_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://\S+$", re.I)

DATETIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
]


def json_formdata(payload):
    """Flatten a JSON object into form data: lists become repeated keys, nulls are dropped."""
    data = MultiDict()
    for key, value in payload.items():
        if value is None:
            continue
        for item in (value if isinstance(value, list) else [value]):
            if isinstance(item, bool):
                item = "true" if item else "false"
            data.add(key, str(item))
    return data


def json_type_error(field, value):
    """Message when a JSON value has the wrong type for `field`, else None."""
    if isinstance(field, BooleanField):
        return None if isinstance(value, bool) else "Must be true or false."
    if isinstance(field, IntegerField):
        if isinstance(value, int) and not isinstance(value, bool):
            return None
        return "Must be an integer."
    if isinstance(field, URLListField):
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return None
        return "Must be a list of strings."
    # text and date fields
    return None if isinstance(value, str) else "Must be a string."


def bind_json(form_cls):
    """Build and validate `form_cls` from the request's JSON body."""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationFailed("Request body must be a JSON object.")
    form = form_cls(formdata=json_formdata(payload))

    type_errors = {}
    for name, value in payload.items():
        if value is None or name not in form:
            continue
        msg = json_type_error(form[name], value)
        if msg:
            type_errors[name] = [msg]
    if type_errors:
        raise ValidationFailed("Validation error", errors=type_errors)

    if not form.validate():
        raise ValidationFailed("Validation error", errors=form.errors)
    return form


def provided(form, *names):
    """Values of the fields the client actually sent."""
    out = {}
    for name in names:
        field = form[name]
        if field.raw_data and field.data not in (None, ""):
            out[name] = field.data
    return out


class ApiForm(FlaskForm):
    # bearer-token API: no CSRF cookie to check
    class Meta:
        csrf = False


class URLListField(Field):
    """Ordered list of URL strings from repeated form keys."""

    def process_data(self, value):
        self.data = list(value) if value else []

    def process_formdata(self, valuelist):
        self.data = [v.strip() for v in valuelist if v and v.strip()]

    def _value(self):
        return ",".join(self.data or [])


class RegisterForm(ApiForm):
    name = StringField(
        "Name",
        validators=[
            DataRequired(),
            Length(min=2, max=60),
            Regexp(NAME_RE, message="Invalid name (letters, spaces, apostrophe or hyphen only).")
        ]
    )
    email = StringField("Email", validators=[DataRequired(), EMAIL_DEV, Length(max=255)])
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(),
            Length(min=8, message="At least 8 characters."),
            Regexp(r"(?=.*[A-Za-z])(?=.*\d)", message="Must include at least 1 letter and 1 number.")
        ]
    )

class LoginForm(ApiForm):
    email = StringField("Email", validators=[DataRequired(), Length(max=255)])
    password = PasswordField("Password", validators=[DataRequired()])


class HomeworkForm(ApiForm):
    subject_id = IntegerField("Subject", validators=[InputRequired()])
    teacher_id = IntegerField("Teacher", validators=[InputRequired()])
    student_id = IntegerField("Student", validators=[Optional()])
    class_id = IntegerField("Class", validators=[Optional()])
    title = StringField("Title", validators=[DataRequired(), Length(max=200)])
    description = StringField("Description", validators=[DataRequired()])
    due_date = DateTimeField("Due date", format=DATETIME_FORMATS, validators=[DataRequired()])
    attachments = URLListField("Attachments")

    def validate_attachments(self, field):
        bad = [url for url in field.data if not URL_RE.match(url)]
        if bad:
            raise ValidationError(f"Not a URL: {', '.join(bad)}")


class HomeworkUpdateForm(ApiForm):
    title = StringField("Title", validators=[Optional(), Length(max=200)])
    description = StringField("Description", validators=[Optional()])
    due_date = DateTimeField("Due date", format=DATETIME_FORMATS, validators=[Optional()])
    completed = BooleanField("Completed", false_values=("false", "0", ""))


class GradeForm(ApiForm):
    student_id = IntegerField("Student", validators=[InputRequired()])
    subject_id = IntegerField("Subject", validators=[InputRequired()])
    value = IntegerField("Grade", validators=[InputRequired(), NumberRange(min=2, max=5)])
    comment = StringField("Comment", validators=[Optional()])
    date = DateTimeField("Date", format=DATETIME_FORMATS, validators=[Optional()])


class GradeUpdateForm(ApiForm):
    value = IntegerField("Grade", validators=[Optional(), NumberRange(min=2, max=5)])
    comment = StringField("Comment", validators=[Optional()])
    date = DateTimeField("Date", format=DATETIME_FORMATS, validators=[Optional()])


class ClassForm(ApiForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=120)])
    grade = IntegerField("Grade", validators=[InputRequired(), NumberRange(min=1, max=11)])
    description = StringField("Description", validators=[Optional()])
    class_teacher_id = IntegerField("Class teacher", validators=[Optional()])


class SubjectForm(ApiForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=120)])
    description = StringField("Description", validators=[Optional()])
    teacher_id = IntegerField("Teacher", validators=[Optional()])


class StudentProfileForm(ApiForm):
    user_id = IntegerField("User", validators=[InputRequired()])
    class_id = IntegerField("Class", validators=[InputRequired()])
    student_number = StringField("Student number", validators=[Optional(), Length(max=32)])


class StudentUpdateForm(ApiForm):
    class_id = IntegerField("Class", validators=[Optional()])
    student_number = StringField("Student number", validators=[Optional(), Length(max=32)])


class TeacherProfileForm(ApiForm):
    user_id = IntegerField("User", validators=[InputRequired()])
    specialization = StringField("Specialization", validators=[Optional(), Length(max=120)])
