"""
API v1 Routes: profile, plan permissions, branding, currency, labels,
artist names, sub-accounts and track allowance.
"""
from flask import request

from trackball.blueprints.api import api_bp
from trackball.blueprints.api.decorators import jwt_required
from trackball.blueprints.api.helpers import api_error, api_success, load_json
from trackball.blueprints.api.schemas import (
    ProfileSchema, ProfileMinimalSchema, PlanPermissionsSchema, FeatureLockSchema,
    LabelSchema, LabelMemberCreateSchema, ActiveLabelSchema, ArtistNameSchema,
    SubAccountCreateSchema, BrandingSchema, BrandingUpdateSchema,
    AccountManagerSchema, CurrencyUpdateSchema, TrackAllowanceSchema,
    TrackConsumeSchema,
)
from trackball.decorators.billing import permission_required, label_account_required
from trackball.extensions import db, limiter
from trackball.models.label import Label
from trackball.models.artist_name import ArtistName
from trackball.models.profile import Profile
from trackball.services.account_service import AccountService
from trackball.services.plan_permissions import get_plan_permissions, feature_lock_states
from trackball.services.track_allowance_service import TrackAllowanceService
from trackball.utils.branding import resolve_branding
from trackball.utils.currency import DEFAULT_CURRENCY, detect_currency, was_auto_detected


@api_bp.route('/health', methods=['GET'])
def api_health():
    """Liveness probe (no auth)."""
    return api_success({'status': 'ok'})


# ── Profile & permissions ───────────────────────────────────

@api_bp.route('/me', methods=['GET'])
@jwt_required
def api_me():
    """Get the current profile."""
    return api_success(ProfileSchema().dump(request.api_user))


@api_bp.route('/me/permissions', methods=['GET'])
@jwt_required
def api_my_permissions():
    """Resolved plan permissions of the current account."""
    permissions = get_plan_permissions(request.api_user)
    return api_success(PlanPermissionsSchema().dump(permissions))


@api_bp.route('/me/features', methods=['GET'])
@jwt_required
def api_my_features():
    """Lock state of every gated feature, with current usage for limits."""
    profile = request.api_user
    states = feature_lock_states(get_plan_permissions(profile), AccountService.usage(profile))
    return api_success(FeatureLockSchema(many=True).dump(states))


@api_bp.route('/me/account-manager', methods=['GET'])
@jwt_required
@permission_required('has_account_manager')
def api_account_manager():
    """Dedicated account manager contact."""
    profile = request.api_user
    if not profile.has_account_manager_contact:
        return api_error('not_found', 'No account manager assigned yet.', 404)
    return api_success(AccountManagerSchema().dump(profile))


# ── Branding ────────────────────────────────────────────────

@api_bp.route('/me/branding', methods=['GET'])
@jwt_required
def api_my_branding():
    """Branding applied to the current dashboard."""
    return api_success(BrandingSchema().dump(resolve_branding(request.api_user)))


@api_bp.route('/me/branding', methods=['PUT'])
@jwt_required
@label_account_required
def api_update_branding():
    """Set subdistributor branding (label accounts only)."""
    data = load_json(BrandingUpdateSchema())
    profile = AccountService.update_branding(request.api_user, data)
    return api_success(BrandingSchema().dump(resolve_branding(profile)))


# ── Currency ────────────────────────────────────────────────

@api_bp.route('/me/currency', methods=['GET'])
@jwt_required
def api_my_currency():
    """Preferred currency (CAD until one is chosen)."""
    profile = request.api_user
    return api_success({
        'currency': profile.preferred_currency or DEFAULT_CURRENCY,
        'is_default': profile.preferred_currency is None,
    })


@api_bp.route('/me/currency', methods=['PUT'])
@jwt_required
def api_update_currency():
    """Update preferred currency."""
    data = load_json(CurrencyUpdateSchema())
    profile = AccountService.update_preferred_currency(request.api_user, data['currency'])
    return api_success({'currency': profile.preferred_currency, 'is_default': False})


@api_bp.route('/currency/detect', methods=['GET'])
def api_detect_currency():
    """Suggest a currency from the `timezone` query arg and Accept-Language.

    Query params:
        timezone (str): IANA timezone reported by the browser
    """
    timezone = request.args.get('timezone')
    languages = [lang for lang, _quality in request.accept_languages]
    return api_success({
        'currency': detect_currency(timezone, languages),
        'auto_detected': was_auto_detected(timezone, languages),
    })


# ── Labels ──────────────────────────────────────────────────

@api_bp.route('/labels', methods=['GET'])
@jwt_required
def api_list_labels():
    """Labels owned by or shared with the current account."""
    labels = AccountService.accessible_labels(request.api_user)
    return api_success(LabelSchema(many=True).dump(labels))


@api_bp.route('/labels', methods=['POST'])
@jwt_required
@limiter.limit('30 per hour')
def api_create_label():
    """Create a label (limited by max_labels)."""
    data = load_json(LabelSchema())
    label = AccountService.create_label(request.api_user, data['name'])
    return api_success(LabelSchema().dump(label), 201)


@api_bp.route('/labels/<label_id>/members', methods=['POST'])
@jwt_required
def api_add_label_member(label_id):
    """Share a label with another account (limited by max_users_per_label)."""
    label = db.session.get(Label, label_id)
    if label is None or not label.is_accessible_by(request.api_user):
        return api_error('not_found', 'Label not found.', 404)

    data = load_json(LabelMemberCreateSchema())
    membership = AccountService.add_label_member(request.api_user, label, data['email'])
    return api_success(ProfileMinimalSchema().dump(membership.profile), 201)


@api_bp.route('/me/active-label', methods=['PUT'])
@jwt_required
def api_set_active_label():
    """Switch (or clear with null) the label the dashboard works under."""
    data = load_json(ActiveLabelSchema())
    profile = AccountService.set_active_label(request.api_user, data['label_id'])
    return api_success({
        'active_label_id': profile.active_label_id,
        'label_name': profile.label_name,
    })


# ── Artist names ────────────────────────────────────────────

@api_bp.route('/artist-names', methods=['GET'])
@jwt_required
def api_list_artist_names():
    names = request.api_user.artist_names.order_by(ArtistName.created_at).all()
    return api_success(ArtistNameSchema(many=True).dump(names))


@api_bp.route('/artist-names', methods=['POST'])
@jwt_required
def api_add_artist_name():
    """Register an artist name (limited by max_artist_names)."""
    data = load_json(ArtistNameSchema())
    artist_name = AccountService.add_artist_name(request.api_user, data['name'])
    return api_success(ArtistNameSchema().dump(artist_name), 201)


# ── Sub-accounts ────────────────────────────────────────────

@api_bp.route('/account/users', methods=['GET'])
@jwt_required
def api_list_sub_accounts():
    profile = request.api_user
    users = profile.sub_accounts.order_by(Profile.created_at).all()
    return api_success({
        'users': ProfileMinimalSchema(many=True).dump(users),
        'user_count': profile.user_count,
        'max_users': get_plan_permissions(profile).max_users,
    })


@api_bp.route('/account/users', methods=['POST'])
@jwt_required
@limiter.limit('30 per hour')
def api_add_sub_account():
    """Add a user to the account (requires can_add_users, limited by max_users)."""
    data = load_json(SubAccountCreateSchema())
    sub_account = AccountService.add_sub_account(
        request.api_user, data['email'], data.get('full_name'),
    )
    return api_success(ProfileMinimalSchema().dump(sub_account), 201)


# ── Track allowance ─────────────────────────────────────────

@api_bp.route('/track-allowance', methods=['GET'])
@jwt_required
def api_track_allowance():
    """Current month's track allowance with usage percentage."""
    usage = TrackAllowanceService.get_usage(request.api_user)
    return api_success(TrackAllowanceSchema().dump(usage))


@api_bp.route('/track-allowance/consume', methods=['POST'])
@jwt_required
@limiter.limit('60 per hour')
def api_consume_track_allowance():
    """Consume tracks from this month's allowance for a release."""
    data = load_json(TrackConsumeSchema())
    usage = TrackAllowanceService.consume(
        request.api_user, data['track_count'], data.get('release_title'),
    )
    return api_success(TrackAllowanceSchema().dump(usage))
