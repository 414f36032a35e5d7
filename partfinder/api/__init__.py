"""
HTTP routes (Flask blueprints)
"""
from flask import current_app, request

from partfinder.errors import InputError


def get_services():
    """The PartFinderService and JobManager registered on the running app."""
    services = current_app.extensions["partfinder"]
    return services["finder"], services["jobs"]


def get_json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InputError("Request body must be a JSON object")
    return data
