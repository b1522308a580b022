from marshmallow import fields, validate, validates_schema, ValidationError

from .base import FormSchema

POSITIVE = validate.Range(min=1, error="Goals must be positive numbers.")
WHOLE_NUMBER = {"invalid": "Goals must be whole numbers."}


class ChallengeSchema(FormSchema):
    title = fields.String(required=True, validate=validate.Length(max=150),
                          error_messages={"required": "Title is required."})
    description = fields.String(required=True,
                                error_messages={"required": "Description, dates and goal are required."})
    start_date = fields.Date(required=True, error_messages={
        "required": "Description, dates and goal are required.",
        "invalid": "Invalid date.",
    })
    end_date = fields.Date(required=True, error_messages={
        "required": "Description, dates and goal are required.",
        "invalid": "Invalid date.",
    })
    goal_count = fields.Integer(required=True, validate=POSITIVE, error_messages={
        **WHOLE_NUMBER, "required": "Description, dates and goal are required.",
    })
    group_goal = fields.Integer(load_default=None, validate=POSITIVE, error_messages=WHOLE_NUMBER)
    prize = fields.String(load_default=None, validate=validate.Length(max=255))
    penalty = fields.String(load_default=None, validate=validate.Length(max=255))

    @validates_schema
    def validate_dates(self, data, **kwargs):
        if data["end_date"] < data["start_date"]:
            raise ValidationError("End date must be on or after the start date.", "end_date")


class ActivitySchema(FormSchema):
    activity = fields.String(required=True, validate=validate.Length(max=150),
                             error_messages={"required": "Enter the type of exercise."})
    logged_on = fields.Date(load_default=None, error_messages={"invalid": "Invalid date."})


class InviteCodeSchema(FormSchema):
    invite_code = fields.String(required=True, error_messages={"required": "Enter an invite code."})


class ParticipantSchema(FormSchema):
    email = fields.Email(required=True, error_messages={
        "required": "Enter the participant's email.",
        "invalid": "Invalid email address.",
    })
