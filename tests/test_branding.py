# =============================================================================
# Trackball API - Branding Resolution Tests
# =============================================================================

from trackball.extensions import db
from trackball.models.profile import Profile
from trackball.utils.branding import DEFAULT_BRANDING, resolve_branding


def _master(**fields):
    master = Profile(
        email='master@test.com',
        account_type='label',
        is_subdistributor_master=True,
        **fields,
    )
    db.session.add(master)
    db.session.commit()
    return master


class TestResolveBranding:
    """Tests for resolve_branding()."""

    def test_defaults(self, app, artist_profile):
        branding = resolve_branding(artist_profile)
        assert branding['name'] == 'Trackball Distribution'
        assert branding['accent_color'] == '#dc2626'
        assert branding['background_color'] == '#000000'
        assert branding['is_custom'] is False

    def test_none_profile(self):
        branding = resolve_branding(None)
        assert branding['is_custom'] is False
        assert branding['name'] == DEFAULT_BRANDING['name']

    def test_master_sees_own_branding(self, app):
        master = _master(
            subdistributor_dashboard_name='North Dist',
            subdistributor_accent_color='#112233',
            subdistributor_logo_url='https://cdn.test/logo.png',
        )
        branding = resolve_branding(master)
        assert branding['name'] == 'North Dist'
        assert branding['accent_color'] == '#112233'
        assert branding['logo_url'] == 'https://cdn.test/logo.png'
        assert branding['is_custom'] is True

    def test_unset_fields_fall_back(self, app):
        master = _master(subdistributor_dashboard_name='North Dist')
        branding = resolve_branding(master)
        assert branding['name'] == 'North Dist'
        assert branding['accent_color'] == '#dc2626'
        assert branding['footer_text'] is None

    def test_sub_account_inherits_parent(self, app):
        master = _master(subdistributor_dashboard_name='North Dist')
        sub = Profile(email='sub@test.com', parent_account_id=master.id)
        db.session.add(sub)
        db.session.commit()

        branding = resolve_branding(sub)
        assert branding['name'] == 'North Dist'
        assert branding['is_custom'] is True

    def test_parent_without_branding(self, app, label_profile):
        sub = Profile(email='sub@test.com', parent_account_id=label_profile.id)
        db.session.add(sub)
        db.session.commit()
        assert resolve_branding(sub)['is_custom'] is False

    def test_defaults_not_mutated(self, app):
        master = _master(subdistributor_dashboard_name='North Dist')
        resolve_branding(master)
        assert DEFAULT_BRANDING['name'] == 'Trackball Distribution'
        assert 'is_custom' not in DEFAULT_BRANDING
