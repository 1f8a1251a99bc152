"""
Submitted form data: JSON object bodies and classic form posts.
"""

from flask import request

from .errors import ValidationError


def request_data():
    """The submitted fields as a dict. A JSON body that is not an object is rejected."""
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def text_field(data, name, strip=True):
    """A text field, '' when missing or null."""
    value = data.get(name)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f'{name.replace("_", " ").capitalize()} must be text')
    return value.strip() if strip else value
