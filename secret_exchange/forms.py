from __future__ import annotations

from flask import current_app, request
from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import DateTimeField, DecimalField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, NumberRange, Optional, ValidationError

from .errors import InvalidRequest


class EventForm(FlaskForm):
    name = StringField("name", validators=[DataRequired(message="Event name is required"), Length(max=255)])
    eventDate = DateTimeField("eventDate", format=["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%d"], validators=[Optional()])
    budget = DecimalField("budget", places=2, validators=[Optional(), NumberRange(min=0)])
    description = StringField("description", validators=[Optional()])

    def validate_description(self, field):
        limit = current_app.config["DESCRIPTION_MAX_LENGTH"]
        if field.data and len(field.data) > limit:
            raise ValidationError(f"Description must be {limit} characters or fewer")


class ParticipantForm(FlaskForm):
    name = StringField("name", validators=[DataRequired(message="Name and email are required"), Length(max=255)])
    email = StringField("email", validators=[DataRequired(message="Name and email are required"), Length(max=320)])


class BulkParticipantsForm(FlaskForm):
    csvData = TextAreaField("csvData", validators=[DataRequired(message="CSV data is required")])


class LoginForm(FlaskForm):
    email = StringField("email", validators=[DataRequired(message="Email and eventId are required")])
    eventId = StringField("eventId", validators=[DataRequired(message="Email and eventId are required")])


class WishlistItemForm(FlaskForm):
    item = StringField("item", validators=[DataRequired(message="Item text is required"), Length(max=1000)])


def _request_formdata():
    if request.is_json:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise InvalidRequest("Request body must be a JSON object")
        fields = {}
        for key, value in payload.items():
            # JSON nulls mean "not given"; WTForms fields expect strings.
            if value is None:
                continue
            if not isinstance(value, (str, int, float, bool)):
                raise InvalidRequest(f"Field '{key}' must be a string or number")
            fields[key] = str(value)
        return ImmutableMultiDict(fields)
    return request.form


def validated(form_cls) -> FlaskForm:
    """Builds `form_cls` from the current request and raises InvalidRequest on errors."""
    form = form_cls(formdata=_request_formdata())
    if not form.validate_on_submit():
        messages = [msg for errors in form.errors.values() for msg in errors]
        raise InvalidRequest(messages[0] if messages else None, details=form.errors)
    return form
