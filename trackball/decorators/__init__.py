"""
Decorators package.
Plan enforcement decorators for API routes.
"""
from trackball.decorators.billing import (
    permission_required,
    label_account_required,
)

__all__ = [
    'permission_required',
    'label_account_required',
]
