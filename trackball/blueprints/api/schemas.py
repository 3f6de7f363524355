"""
Marshmallow schemas for API serialization and request validation.
"""
import re

from marshmallow import Schema, fields, validate, validates, ValidationError, EXCLUDE


# ── Shared helpers ──────────────────────────────────────────

class BaseSchema(Schema):
    """Base schema with common config."""
    class Meta:
        ordered = True
        unknown = EXCLUDE


_HEX_COLOR = re.compile(r'^#[0-9a-fA-F]{6}$')


# ── Profile ─────────────────────────────────────────────────

class ProfileMinimalSchema(BaseSchema):
    """Minimal profile representation (sub-accounts, label members)."""
    id = fields.Str(dump_only=True)
    email = fields.Email()
    full_name = fields.Str(allow_none=True)
    created_at = fields.DateTime(format='iso', dump_only=True)


class ProfileSchema(BaseSchema):
    """Full profile representation (for /me endpoint)."""
    id = fields.Str(dump_only=True)
    email = fields.Email()
    full_name = fields.Str(allow_none=True)
    display_name = fields.Str(allow_none=True)
    artist_name = fields.Str(allow_none=True)
    account_type = fields.Method('get_account_type')
    label_type = fields.Str(allow_none=True)
    active_label_id = fields.Str(allow_none=True)
    label_name = fields.Str(allow_none=True)
    parent_account_id = fields.Str(allow_none=True)
    is_subdistributor_master = fields.Bool()
    preferred_currency = fields.Str(allow_none=True)
    user_timezone = fields.Str(allow_none=True)
    created_at = fields.DateTime(format='iso')

    def get_account_type(self, obj):
        return obj.account_kind.value


# ── Plan permissions ────────────────────────────────────────

class PlanPermissionsSchema(BaseSchema):
    """PlanPermissions with the camelCase names the dashboard reads."""
    canAddUsers = fields.Bool(attribute='can_add_users')
    canCreateLabels = fields.Bool(attribute='can_create_labels')
    canAccessPublishing = fields.Bool(attribute='can_access_publishing')
    canAccessTickets = fields.Bool(attribute='can_access_tickets')
    hasAccountManager = fields.Bool(attribute='has_account_manager')
    maxUsers = fields.Int(attribute='max_users', allow_none=True)
    maxLabels = fields.Int(attribute='max_labels', allow_none=True)
    maxUsersPerLabel = fields.Int(attribute='max_users_per_label', allow_none=True)
    maxArtistNames = fields.Int(attribute='max_artist_names', allow_none=True)
    planDisplayName = fields.Str(attribute='plan_display_name')
    accountType = fields.Str(attribute='account_type')


class FeatureLockSchema(BaseSchema):
    """Lock badge state for one gated feature."""
    feature = fields.Str()
    locked = fields.Bool()
    message = fields.Str(allow_none=True)
    current = fields.Int(allow_none=True)
    max = fields.Int(allow_none=True)


# ── Labels ──────────────────────────────────────────────────

class LabelSchema(BaseSchema):
    """Label representation."""
    id = fields.Str(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    owner_id = fields.Str(dump_only=True)
    logo_url = fields.Url(allow_none=True)
    member_count = fields.Method('get_member_count', dump_only=True)
    created_at = fields.DateTime(format='iso', dump_only=True)

    def get_member_count(self, obj):
        return obj.members.count()


class LabelMemberCreateSchema(BaseSchema):
    email = fields.Email(required=True)


class ActiveLabelSchema(BaseSchema):
    label_id = fields.Str(required=True, allow_none=True)


# ── Artist names & sub-accounts ─────────────────────────────

class ArtistNameSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    created_at = fields.DateTime(format='iso', dump_only=True)


class SubAccountCreateSchema(BaseSchema):
    email = fields.Email(required=True)
    full_name = fields.Str(allow_none=True, validate=validate.Length(max=200))


# ── Branding ────────────────────────────────────────────────

class BrandingSchema(BaseSchema):
    """Resolved dashboard branding."""
    name = fields.Str()
    accent_color = fields.Str()
    background_color = fields.Str()
    logo_url = fields.Str(allow_none=True)
    banner_url = fields.Str(allow_none=True)
    footer_text = fields.Str(allow_none=True)
    is_custom = fields.Bool()


class BrandingUpdateSchema(BaseSchema):
    """Subdistributor branding fields a label account may set."""
    dashboard_name = fields.Str(allow_none=True, validate=validate.Length(max=200))
    logo_url = fields.Url(allow_none=True)
    banner_url = fields.Url(allow_none=True)
    accent_color = fields.Str(allow_none=True)
    footer_text = fields.Str(allow_none=True, validate=validate.Length(max=500))

    @validates('accent_color')
    def validate_accent_color(self, value, **kwargs):
        if value is not None and not _HEX_COLOR.match(value):
            raise ValidationError('Must be a hex color like #dc2626.')


# ── Account manager ─────────────────────────────────────────

class AccountManagerSchema(BaseSchema):
    name = fields.Str(attribute='account_manager_name', allow_none=True)
    email = fields.Str(attribute='account_manager_email', allow_none=True)
    phone = fields.Str(attribute='account_manager_phone', allow_none=True)
    timezone = fields.Str(attribute='account_manager_timezone', allow_none=True)


# ── Currency ────────────────────────────────────────────────

class CurrencyUpdateSchema(BaseSchema):
    currency = fields.Str(required=True, validate=validate.Length(equal=3))


# ── Track allowance ─────────────────────────────────────────

class TrackAllowanceSchema(BaseSchema):
    """Monthly usage with progress bar percentage."""
    month_year = fields.Str()
    tracks_allowed = fields.Int()
    tracks_used = fields.Int(attribute='track_count')
    tracks_remaining = fields.Int()
    usage_percentage = fields.Float()


class TrackConsumeSchema(BaseSchema):
    track_count = fields.Int(required=True, strict=True, validate=validate.Range(min=1))
    release_title = fields.Str(allow_none=True, validate=validate.Length(max=300))
