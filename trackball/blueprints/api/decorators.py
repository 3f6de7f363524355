"""
Bearer token authentication for the REST API.
Tokens are minted by the auth backend; this side only verifies them.
"""
from functools import wraps

import jwt
from flask import request, current_app

from trackball.blueprints.api.helpers import api_error
from trackball.extensions import db
from trackball.models.profile import Profile


def decode_token(token):
    """Decode and validate a JWT access token. Returns payload or None."""
    secret = current_app.config.get('JWT_SECRET_KEY') or current_app.config['SECRET_KEY']
    audience = current_app.config.get('JWT_AUDIENCE')
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=['HS256'],
            audience=audience,
            options={'require': ['exp', 'sub'], 'verify_aud': audience is not None},
        )
    except jwt.ExpiredSignatureError:
        current_app.logger.debug('Rejected expired access token')
        return None
    except jwt.InvalidTokenError as e:
        current_app.logger.debug('Rejected invalid access token: %s', e)
        return None


def get_current_api_user():
    """Extract the profile from the Authorization header. Returns (profile, error_response)."""
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None, api_error('missing_token', 'Authorization header with Bearer token required.', 401)

    token = auth_header[7:]  # Strip "Bearer "
    payload = decode_token(token)
    if payload is None:
        return None, api_error('invalid_token', 'Token is invalid or expired.', 401)

    profile = db.session.get(Profile, str(payload['sub']))
    if profile is None:
        return None, api_error('user_not_found', 'No profile for this account.', 401)

    return profile, None


def jwt_required(f):
    """Decorator: require valid bearer access token."""
    @wraps(f)
    def decorated(*args, **kwargs):
        profile, error = get_current_api_user()
        if error:
            return error
        request.api_user = profile
        return f(*args, **kwargs)
    return decorated
