from marshmallow import EXCLUDE, ValidationError, pre_load

from fitchallenge.extensions import ma


class FormSchema(ma.Schema):
    """Loads HTML form posts: strips text and treats blank inputs as missing."""

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def strip_blanks(self, data, **kwargs):
        cleaned = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip()
                if value == "":
                    continue
            cleaned[key] = value
        return cleaned


def first_error(error: ValidationError) -> str:
    """Return the first human-readable message of a validation error."""
    messages = error.messages
    while isinstance(messages, (dict, list)):
        if not messages:
            return "Invalid data."
        messages = next(iter(messages.values())) if isinstance(messages, dict) else messages[0]
    return str(messages)
