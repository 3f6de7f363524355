"""
Dashboard branding resolution for subdistributors and their sub-accounts.
"""

DEFAULT_BRANDING = {
    'name': 'Trackball Distribution',
    'accent_color': '#dc2626',
    'background_color': '#000000',
    'logo_url': None,
    'banner_url': None,
    'footer_text': None,
}


def _branding_source(profile):
    """The profile whose subdistributor fields apply, or None."""
    if profile is None:
        return None
    if profile.is_subdistributor_master:
        return profile
    parent = profile.parent_account
    if parent is not None and parent.is_subdistributor_master:
        return parent
    return None


def resolve_branding(profile):
    """Branding shown on the profile's dashboard.

    A subdistributor master sees its own branding, a sub-account sees its
    parent's, everyone else the defaults. Unset fields fall back individually.
    """
    source = _branding_source(profile)
    branding = dict(DEFAULT_BRANDING)
    if source is None:
        branding['is_custom'] = False
        return branding

    overrides = {
        'name': source.subdistributor_dashboard_name,
        'accent_color': source.subdistributor_accent_color,
        'logo_url': source.subdistributor_logo_url,
        'banner_url': source.subdistributor_banner_url,
        'footer_text': source.subdistributor_footer_text,
    }
    branding.update({key: value for key, value in overrides.items() if value})
    branding['is_custom'] = True
    return branding
