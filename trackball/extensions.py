"""
Flask extensions initialization.
Extensions are initialized here and bound to the app in the factory.
"""
from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Database
db = SQLAlchemy()


# Rate Limiting
def global_rate_limit():
    """Default limit of every route (RATELIMIT_GLOBAL)."""
    return current_app.config.get('RATELIMIT_GLOBAL', '100 per minute')


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[global_rate_limit]
)


def init_extensions(app):
    """Initialize all extensions with the Flask app."""
    db.init_app(app)
    limiter.init_app(app)

    # Register all tables on the metadata before create_all
    from trackball import models  # noqa: F401
