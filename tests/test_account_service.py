# =============================================================================
# Trackball API - Account Service Tests (plan enforcement)
# =============================================================================
#
# NOTE: The `app` fixture already pushes an app context (via `with app.app_context():`
# in conftest.py). Do NOT wrap test bodies with `with app.app_context():`.
# =============================================================================

import pytest

from trackball.extensions import db
from trackball.models.label import Label, LabelMember
from trackball.models.profile import Profile
from trackball.services.account_service import AccountService, AccountError
from trackball.services.plan_permissions import PlanLimitExceeded, FeatureLocked


# =============================================================================
# Labels
# =============================================================================

class TestCreateLabel:
    """Tests for AccountService.create_label()."""

    def test_artist_can_create_one_label(self, app, artist_profile):
        label = AccountService.create_label(artist_profile, '  Basement Records ')
        assert label.id is not None
        assert label.name == 'Basement Records'
        assert label.owner_id == artist_profile.id

    def test_artist_second_label_hits_limit(self, app, artist_profile):
        AccountService.create_label(artist_profile, 'First')
        with pytest.raises(PlanLimitExceeded) as exc_info:
            AccountService.create_label(artist_profile, 'Second')
        assert exc_info.value.limit_name == 'labels'
        assert exc_info.value.current == 1
        assert exc_info.value.maximum == 1

    def test_label_account_is_unlimited(self, app, label_profile):
        for i in range(5):
            AccountService.create_label(label_profile, f'Imprint {i}')
        assert label_profile.owned_labels.count() == 5

    def test_duplicate_name_rejected(self, app, label_profile):
        AccountService.create_label(label_profile, 'Imprint')
        with pytest.raises(AccountError) as exc_info:
            AccountService.create_label(label_profile, 'Imprint')
        assert exc_info.value.code == 'duplicate'

    @pytest.mark.parametrize('name', ['', '   ', '\t\n'])
    def test_blank_name_rejected(self, app, artist_profile, name):
        with pytest.raises(AccountError) as exc_info:
            AccountService.create_label(artist_profile, name)
        assert exc_info.value.code == 'validation_error'
        assert artist_profile.owned_labels.count() == 0

        # The only label slot is still free
        assert AccountService.create_label(artist_profile, 'Real Label').name == 'Real Label'


class TestLabelMembers:
    """Tests for AccountService.add_label_member()."""

    def test_artist_cannot_share_label(self, app, artist_profile, other_profile):
        label = AccountService.create_label(artist_profile, 'Solo')
        with pytest.raises(PlanLimitExceeded) as exc_info:
            AccountService.add_label_member(artist_profile, label, other_profile.email)
        assert exc_info.value.maximum == 0

    def test_label_account_can_share(self, app, label_profile, other_profile):
        label = AccountService.create_label(label_profile, 'Shared')
        membership = AccountService.add_label_member(label_profile, label, 'OTHER@test.com ')
        assert membership.profile_id == other_profile.id
        assert label.is_accessible_by(other_profile)

    def test_only_owner_adds_members(self, app, label_profile, other_profile):
        label = AccountService.create_label(label_profile, 'Shared')
        with pytest.raises(AccountError) as exc_info:
            AccountService.add_label_member(other_profile, label, label_profile.email)
        assert exc_info.value.status == 403

    def test_unknown_email(self, app, label_profile):
        label = AccountService.create_label(label_profile, 'Shared')
        with pytest.raises(AccountError) as exc_info:
            AccountService.add_label_member(label_profile, label, 'nobody@test.com')
        assert exc_info.value.status == 404

    def test_member_email_case_insensitive(self, app, label_profile):
        mixed = Profile(email='Mixed.Case@Test.com', account_type='artist')
        db.session.add(mixed)
        db.session.commit()

        label = AccountService.create_label(label_profile, 'Shared')
        membership = AccountService.add_label_member(label_profile, label, 'mixed.case@test.com')
        assert membership.profile_id == mixed.id

    def test_member_added_once(self, app, label_profile, other_profile):
        label = AccountService.create_label(label_profile, 'Shared')
        AccountService.add_label_member(label_profile, label, other_profile.email)
        with pytest.raises(AccountError):
            AccountService.add_label_member(label_profile, label, other_profile.email)
        assert LabelMember.query.count() == 1


class TestActiveLabel:
    """Tests for AccountService.set_active_label()."""

    def test_set_owned_label(self, app, label_profile):
        label = AccountService.create_label(label_profile, 'Main')
        AccountService.set_active_label(label_profile, label.id)
        assert label_profile.active_label_id == label.id
        assert label_profile.label_name == 'Main'

    def test_set_shared_label(self, app, label_profile, other_profile):
        label = AccountService.create_label(label_profile, 'Shared')
        AccountService.add_label_member(label_profile, label, other_profile.email)
        AccountService.set_active_label(other_profile, label.id)
        assert other_profile.active_label_id == label.id

    def test_foreign_label_rejected(self, app, label_profile, other_profile):
        label = AccountService.create_label(label_profile, 'Private')
        with pytest.raises(AccountError) as exc_info:
            AccountService.set_active_label(other_profile, label.id)
        assert exc_info.value.status == 404

    def test_clear_active_label(self, app, label_profile):
        label = AccountService.create_label(label_profile, 'Main')
        AccountService.set_active_label(label_profile, label.id)
        AccountService.set_active_label(label_profile, None)
        assert label_profile.active_label_id is None
        assert label_profile.label_name is None


# =============================================================================
# Sub-accounts
# =============================================================================

class TestSubAccounts:
    """Tests for AccountService.add_sub_account()."""

    def test_artist_cannot_add_users(self, app, artist_profile):
        with pytest.raises(FeatureLocked) as exc_info:
            AccountService.add_sub_account(artist_profile, 'crew@test.com')
        assert exc_info.value.flag == 'can_add_users'

    def test_label_adds_users(self, app, label_profile):
        sub = AccountService.add_sub_account(label_profile, ' Crew@Test.com', 'Crew Member')
        assert sub.email == 'crew@test.com'
        assert sub.parent_account_id == label_profile.id
        assert sub.account_type == label_profile.account_type
        assert label_profile.user_count == 2

    def test_existing_email_rejected(self, app, label_profile, other_profile):
        with pytest.raises(AccountError) as exc_info:
            AccountService.add_sub_account(label_profile, other_profile.email)
        assert exc_info.value.code == 'duplicate'

    def test_existing_mixed_case_email_rejected(self, app, label_profile):
        db.session.add(Profile(email='Crew@Test.com'))
        db.session.commit()
        with pytest.raises(AccountError) as exc_info:
            AccountService.add_sub_account(label_profile, 'crew@test.com')
        assert exc_info.value.code == 'duplicate'


# =============================================================================
# Artist names
# =============================================================================

class TestArtistNames:
    """Tests for AccountService.add_artist_name()."""

    def test_artist_limited_to_three(self, app, artist_profile):
        for name in ('One', 'Two', 'Three'):
            AccountService.add_artist_name(artist_profile, name)
        with pytest.raises(PlanLimitExceeded) as exc_info:
            AccountService.add_artist_name(artist_profile, 'Four')
        assert exc_info.value.current == 3
        assert artist_profile.artist_names.count() == 3

    def test_untyped_profile_gets_artist_limit(self, app, untyped_profile):
        for name in ('One', 'Two', 'Three'):
            AccountService.add_artist_name(untyped_profile, name)
        with pytest.raises(PlanLimitExceeded):
            AccountService.add_artist_name(untyped_profile, 'Four')

    def test_label_unlimited(self, app, label_profile):
        for i in range(6):
            AccountService.add_artist_name(label_profile, f'Act {i}')
        assert label_profile.artist_names.count() == 6

    def test_duplicate_rejected(self, app, label_profile):
        AccountService.add_artist_name(label_profile, 'Act')
        with pytest.raises(AccountError):
            AccountService.add_artist_name(label_profile, 'Act')

    def test_blank_name_rejected(self, app, artist_profile):
        with pytest.raises(AccountError):
            AccountService.add_artist_name(artist_profile, '   ')
        assert artist_profile.artist_names.count() == 0


# =============================================================================
# Usage, branding, currency
# =============================================================================

class TestUsageAndSettings:
    """Tests for usage counts and profile settings."""

    def test_usage_counts(self, app, label_profile, other_profile):
        label = AccountService.create_label(label_profile, 'Main')
        AccountService.create_label(label_profile, 'Side')
        AccountService.add_label_member(label_profile, label, other_profile.email)
        AccountService.add_artist_name(label_profile, 'Act')
        AccountService.add_sub_account(label_profile, 'crew@test.com')

        assert AccountService.usage(label_profile) == {
            'max_users': 2,
            'max_labels': 2,
            'max_users_per_label': 1,
            'max_artist_names': 1,
        }

    def test_usage_empty_account(self, app, artist_profile):
        assert AccountService.usage(artist_profile) == {
            'max_users': 1,
            'max_labels': 0,
            'max_users_per_label': 0,
            'max_artist_names': 0,
        }

    def test_accessible_labels_owned_then_shared(self, app, label_profile, other_profile):
        shared = AccountService.create_label(label_profile, 'Shared')
        AccountService.add_label_member(label_profile, shared, other_profile.email)
        own = AccountService.create_label(other_profile, 'Own')

        assert AccountService.accessible_labels(other_profile) == [own, shared]

    def test_update_branding_marks_master(self, app, label_profile):
        AccountService.update_branding(label_profile, {'dashboard_name': 'North Dist', 'accent_color': '#112233'})
        profile = db.session.get(Profile, label_profile.id)
        assert profile.is_subdistributor_master is True
        assert profile.subdistributor_dashboard_name == 'North Dist'
        assert profile.subdistributor_accent_color == '#112233'

    def test_update_currency(self, app, artist_profile):
        AccountService.update_preferred_currency(artist_profile, 'eur')
        assert artist_profile.preferred_currency == 'EUR'

    def test_update_currency_unsupported(self, app, artist_profile):
        with pytest.raises(AccountError):
            AccountService.update_preferred_currency(artist_profile, 'CHF')
        assert artist_profile.preferred_currency is None

    def test_deleting_label_removes_members(self, app, label_profile, other_profile):
        label = AccountService.create_label(label_profile, 'Gone')
        AccountService.add_label_member(label_profile, label, other_profile.email)
        db.session.delete(label)
        db.session.commit()
        assert Label.query.count() == 0
        assert LabelMember.query.count() == 0
