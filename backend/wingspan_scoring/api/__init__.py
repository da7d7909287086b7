from flask import request

from wingspan_scoring.errors import InvalidInput


def json_body() -> dict:
    """Return the request's JSON object, or raise InvalidInput."""
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidInput('Invalid JSON data')
    if not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')
    return data


def flag_value(source, name: str):
    """Read an on/off flag from a form or JSON mapping; None when absent."""
    if name not in source:
        return None
    value = source.get(name)
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)
