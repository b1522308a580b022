from flask import current_app
from marshmallow import fields, validate, validates_schema, ValidationError

from .base import FormSchema

REQUIRED = {"required": "Fill in all required fields."}


def _check_length(password):
    min_length = current_app.config.get("PASSWORD_MIN_LENGTH", 6)
    if len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters.", "password")


class RegisterSchema(FormSchema):
    name = fields.String(required=True, error_messages=REQUIRED, validate=validate.Length(max=150))
    email = fields.Email(required=True, error_messages={**REQUIRED, "invalid": "Invalid email address."})
    password = fields.String(required=True, error_messages=REQUIRED)

    @validates_schema
    def validate_password(self, data, **kwargs):
        _check_length(data["password"])


class LoginSchema(FormSchema):
    email = fields.String(required=True, error_messages={"required": "Invalid email or password."})
    password = fields.String(required=True, error_messages={"required": "Invalid email or password."})


class PasswordChangeSchema(FormSchema):
    current_password = fields.String(required=True, error_messages=REQUIRED)
    new_password = fields.String(required=True, error_messages=REQUIRED)
    confirm_password = fields.String(required=True, error_messages=REQUIRED)

    @validates_schema
    def validate_passwords(self, data, **kwargs):
        if data["new_password"] != data["confirm_password"]:
            raise ValidationError("Passwords do not match.", "confirm_password")
        _check_length(data["new_password"])


class GoalSchema(FormSchema):
    goal_exercises = fields.Integer(
        required=True,
        validate=validate.Range(min=0, error="Goal must be zero or a positive number."),
        error_messages={"required": "Enter a goal.", "invalid": "Goal must be a whole number."},
    )
