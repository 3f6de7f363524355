"""
Trackball Application Factory.
Creates and configures the Flask application instance.
"""
import os
import json
import logging
import uuid
from datetime import datetime, timezone

import click
from flask import Flask, request, g

from trackball.config import config
from trackball.extensions import init_extensions, db


def _init_sentry(app):
    """Initialize Sentry error tracking for production."""
    dsn = app.config.get('SENTRY_DSN')
    if not dsn:
        app.logger.info('SENTRY_DSN not set, error tracking disabled.')
        return

    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=float(os.environ.get('SENTRY_TRACES_RATE', '0.1')),
        environment=os.environ.get('FLASK_ENV', 'production'),
        send_default_pii=False,
    )
    app.logger.info('Sentry error tracking initialized.')


def create_app(config_name=None):
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration to use (development, testing, production)

    Returns:
        Configured Flask application instance
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)

    config_class = config[config_name]
    app.config.from_object(config_class)

    if config_name == 'production':
        _init_sentry(app)

    # Production validation happens here
    if hasattr(config_class, 'init_app'):
        config_class.init_app(app)

    init_extensions(app)

    register_blueprints(app)
    register_error_handlers(app)
    register_cli_commands(app)
    configure_logging(app)

    # Create database tables (development only)
    if config_name == 'development':
        with app.app_context():
            db.create_all()

    return app


def register_blueprints(app):
    """Register all application blueprints."""
    from trackball.blueprints.api import api_bp

    # REST API v1, bearer tokens issued by the managed auth backend
    app.register_blueprint(api_bp, url_prefix='/api/v1')


def register_error_handlers(app):
    """Register JSON error handlers for HTTP errors and plan enforcement."""
    from marshmallow import ValidationError

    from trackball.blueprints.api.helpers import api_error
    from trackball.services.plan_permissions import PlanLimitExceeded, FeatureLocked
    from trackball.services.account_service import AccountError
    from trackball.services.track_allowance_service import InsufficientTrackAllowance

    @app.errorhandler(400)
    def bad_request(error):
        return api_error('bad_request', 'Malformed request.', 400)

    @app.errorhandler(403)
    def forbidden(error):
        return api_error('forbidden', 'Access denied.', 403)

    @app.errorhandler(404)
    def not_found(error):
        return api_error('not_found', 'Resource not found.', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return api_error('method_not_allowed', 'Method not allowed.', 405)

    @app.errorhandler(429)
    def ratelimit_error(error):
        return api_error('rate_limit_exceeded', 'Too many requests. Try again later.', 429)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        request_id = g.get('request_id', '-')
        app.logger.error('500 Internal Server Error: %s (request_id=%s)', type(error).__name__, request_id, exc_info=True)
        return api_error('internal_error', 'Internal server error.', 500, request_id=request_id)

    @app.errorhandler(PlanLimitExceeded)
    def plan_limit_reached(error):
        app.logger.info('Plan limit reached: %s (%s/%s)', error.limit_name, error.current, error.maximum)
        return api_error('plan_limit_reached', str(error), 403, details=[{
            'limit': error.limit_name,
            'current': error.current,
            'max': error.maximum,
        }])

    @app.errorhandler(FeatureLocked)
    def feature_locked(error):
        return api_error('feature_locked', str(error), 403)

    @app.errorhandler(InsufficientTrackAllowance)
    def insufficient_allowance(error):
        return api_error('insufficient_allowance', str(error), 422)

    @app.errorhandler(AccountError)
    def account_error(error):
        return api_error(error.code, str(error), error.status)

    @app.errorhandler(ValidationError)
    def validation_error(error):
        details = [
            {'field': field, 'message': ' '.join(messages) if isinstance(messages, list) else str(messages)}
            for field, messages in error.normalized_messages().items()
        ]
        return api_error('validation_error', 'Request validation failed.', 422, details=details)


def register_cli_commands(app):
    """Register custom CLI commands."""

    def _profile_or_fail(profile_id):
        from trackball.models.profile import Profile

        profile = db.session.get(Profile, profile_id)
        if profile is None:
            raise click.ClickException(f'Profile {profile_id} not found')
        return profile

    @app.cli.command('seed-plans')
    def seed_plans():
        """Insert the plan catalogue if missing."""
        from trackball.models.subscription import seed_plans as _seed_plans

        created = _seed_plans()
        for plan in created:
            print(f"Created plan: {plan.name}")
        if not created:
            print("Plan catalogue already seeded.")

    @app.cli.command('show-permissions')
    @click.argument('profile_id')
    def show_permissions(profile_id):
        """Print the resolved plan permissions of a profile as JSON."""
        from trackball.services.plan_permissions import resolve_plan_permissions
        from trackball.blueprints.api.schemas import PlanPermissionsSchema

        profile = _profile_or_fail(profile_id)
        permissions = resolve_plan_permissions(profile.current_plan, profile)
        print(json.dumps(PlanPermissionsSchema().dump(permissions), indent=2))

    @app.cli.command('grant-track-allowance')
    @click.argument('profile_id')
    @click.argument('tracks_per_month', type=click.IntRange(min=1))
    def grant_track_allowance(profile_id, tracks_per_month):
        """Grant this month's track allowance to a profile (resets its count)."""
        from trackball.services.track_allowance_service import TrackAllowanceService

        usage = TrackAllowanceService.grant(_profile_or_fail(profile_id), tracks_per_month)
        print(f"Granted {usage.tracks_allowed} tracks for {usage.month_year} to {profile_id}")

    @app.cli.command('revoke-track-allowance')
    @click.argument('profile_id')
    def revoke_track_allowance(profile_id):
        """Remove this month's track allowance of a profile."""
        from trackball.services.track_allowance_service import TrackAllowanceService

        if TrackAllowanceService.revoke(_profile_or_fail(profile_id)):
            print(f"Revoked track allowance of {profile_id}")
        else:
            print(f"No track allowance to revoke for {profile_id}")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production (serverless and cloud platforms)."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'module': record.module,
            'line': record.lineno,
        }
        try:
            log_entry['request_id'] = g.get('request_id', '-')
        except RuntimeError:
            pass  # Outside request context
        if record.exc_info and record.exc_info[0]:
            log_entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def configure_logging(app):
    """Configure application logging.

    Production: JSON to stdout (for cloud log aggregation).
    Development: plain text.
    """
    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4())[:8])

    if app.testing:
        return

    @app.after_request
    def log_request(response):
        app.logger.info(
            '%s %s %s',
            request.method,
            request.path,
            response.status_code,
        )
        return response

    if not app.debug:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(JSONFormatter())
        stream_handler.setLevel(logging.INFO)

        # Clear existing handlers to avoid duplicates
        app.logger.handlers.clear()
        app.logger.addHandler(stream_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Trackball startup (JSON logging)')
    else:
        app.logger.setLevel(logging.DEBUG)
        app.logger.info('Trackball startup (development)')
