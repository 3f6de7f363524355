# =============================================================================
# Trackball API - Pytest Fixtures Configuration
# =============================================================================

import pytest
from datetime import datetime, timedelta, timezone

import jwt as pyjwt

from trackball import create_app
from trackball.extensions import db
from trackball.models.profile import Profile
from trackball.models.subscription import Plan, UserPlan, SubscriptionStatus


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture(scope='function')
def app():
    """Create and configure test application with SQLite in-memory database."""
    application = create_app('testing')

    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Test client for HTTP requests."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """CLI test runner."""
    return app.test_cli_runner()


# =============================================================================
# Token Helpers
# =============================================================================

def make_token(app, subject, expires_in=timedelta(hours=1), secret=None, audience='authenticated'):
    """Mint an access token the way the auth backend does (HS256, sub = profile id)."""
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(subject),
        'aud': audience,
        'role': 'authenticated',
        'iat': now,
        'exp': now + expires_in,
    }
    return pyjwt.encode(payload, secret or app.config['JWT_SECRET_KEY'], algorithm='HS256')


@pytest.fixture
def auth_headers(app):
    """Factory: Authorization headers for a profile."""
    def _headers(profile, **kwargs):
        return {'Authorization': f'Bearer {make_token(app, profile.id, **kwargs)}'}
    return _headers


# =============================================================================
# Profile Fixtures
# =============================================================================

def _create_profile(**fields):
    profile = Profile(**fields)
    db.session.add(profile)
    db.session.commit()
    profile_id = profile.id
    db.session.expire_all()
    return db.session.get(Profile, profile_id)


@pytest.fixture
def artist_profile(app):
    """Create an artist account."""
    return _create_profile(
        email='artist@test.com',
        full_name='Test Artist',
        artist_name='The Testers',
        account_type='artist',
    )


@pytest.fixture
def label_profile(app):
    """Create a label account with an account manager."""
    return _create_profile(
        email='label@test.com',
        full_name='Test Label Owner',
        account_type='Label',
        label_type='label prestige',
        account_manager_name='Dana Manager',
        account_manager_email='dana@trackball.test',
        account_manager_phone='+1 416 555 0100',
        account_manager_timezone='America/Toronto',
    )


@pytest.fixture
def other_profile(app):
    """Create a second artist account (target for label sharing)."""
    return _create_profile(
        email='other@test.com',
        full_name='Other Artist',
        account_type='artist',
    )


@pytest.fixture
def untyped_profile(app):
    """Create an account that never picked an account type."""
    return _create_profile(email='untyped@test.com')


# =============================================================================
# Plan Fixtures
# =============================================================================

@pytest.fixture
def prestige_plan(app):
    """Create the Trackball Prestige catalogue plan."""
    plan = Plan(name='Trackball Prestige', monthly_price_cents=4999)
    db.session.add(plan)
    db.session.commit()
    return plan


@pytest.fixture
def artist_user_plan(app, artist_profile, prestige_plan):
    """Subscribe the artist account to Prestige."""
    user_plan = UserPlan(
        profile_id=artist_profile.id,
        plan_id=prestige_plan.id,
        status=SubscriptionStatus.ACTIVE,
    )
    db.session.add(user_plan)
    db.session.commit()
    return user_plan
