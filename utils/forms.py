"""
Request input helpers shared by the route packages.
"""

from flask import request


def request_data():
    """Submitted fields: the JSON body for JSON requests, otherwise the form."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form


def arg_flag(name, default=False):
    value = request.args.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'on', 'yes', 'y')


def arg_int(name, default, minimum=None):
    """Integer query argument; invalid values fall back to default."""
    try:
        value = int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default
    if minimum is not None and value < minimum:
        return default
    return value
