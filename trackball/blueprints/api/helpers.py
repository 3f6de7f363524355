"""
API helper functions: error formatting and response builders.
"""
from flask import request, jsonify

from marshmallow import ValidationError


def api_error(code, message, status=400, details=None, request_id=None):
    """Build a standard API error response."""
    error_body = {
        'error': {
            'code': code,
            'message': message,
        }
    }
    if details:
        error_body['error']['details'] = details
    if request_id:
        error_body['error']['request_id'] = request_id
    return jsonify(error_body), status


def api_success(data, status=200):
    """Build a standard API success response."""
    return jsonify({'data': data}), status


def load_json(schema):
    """Validate the request body against a marshmallow schema.

    Raises:
        ValidationError: Rendered as 422 validation_error by the app
    """
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError({'_schema': ['Request body must be valid JSON.']})
    return schema.load(data)
