"""
Trust level gate.

Views that need a minimum level for a role wrap themselves in ``require_level``:

    @require_level(TrustLevel.L2, role=Role.MENTOR)
    def book_mentorship(request):
        ...

The user's effective level is resolved from, in order: the trust cache on the
user, the latest approved verification for the role, L0 when the email is
verified. Anything else is "no level". Resolution failures deny access.
"""

import logging
from functools import wraps
from typing import Optional

from django.db import DatabaseError

from .choices import Role, TrustLevel
from .exceptions import AuthorizationError, KYCError, ValidationError
from .http import error_response
from .models import Verification

logger = logging.getLogger(__name__)


def level_label(level: Optional[TrustLevel]) -> str:
    if level is None:
        return "no verification"
    return TrustLevel(level).label


def resolve_effective_level(user, role) -> Optional[TrustLevel]:
    role = Role(role)

    cached = user.get_cached_level(role)
    if cached is not None:
        return cached

    approved = Verification.objects.latest_approved(user, role)
    if approved is not None:
        return approved.trust_level

    if user.is_verified:
        return TrustLevel.L0
    return None


def meets_level(effective: Optional[TrustLevel], required: TrustLevel) -> bool:
    return effective is not None and effective >= required


def check_level(user, min_level, role=None):
    """
    Return ``(role, effective_level)`` if ``user`` meets ``min_level``; raise otherwise.

    AuthorizationError when the level is too low or cannot be resolved,
    ValidationError when no role is given and the user has no primary role.
    """
    required = TrustLevel.coerce(min_level)
    check_role = role or getattr(user, "primary_role", None)
    if not check_role:
        raise ValidationError("No role specified for verification check")

    try:
        effective = resolve_effective_level(user, check_role)
    except (DatabaseError, ValueError) as exc:
        logger.error("Could not resolve trust level for user %s role %s: %s", user.pk, check_role, exc)
        effective = None

    if not meets_level(effective, required):
        logger.info(
            "Denied user %s: role %s requires L%s, has %s",
            user.pk, check_role, int(required), "none" if effective is None else f"L{int(effective)}",
        )
        raise AuthorizationError(
            f"This action requires {level_label(required)} verification. "
            f"Your current level is {level_label(effective)}.",
            role=str(check_role),
            required_level=int(required),
            current_level=None if effective is None else int(effective),
        )
    return Role(check_role), effective


def has_level(user, min_level, role=None) -> bool:
    try:
        check_level(user, min_level, role)
    except KYCError:
        return False
    return True


def require_level(min_level, role=None):
    """
    View decorator enforcing ``min_level`` for ``role`` (default: the user's primary role).

    ``min_level`` outside 0..3 raises ValueError when the decorator is built.
    """
    required = TrustLevel.coerce(min_level)
    if role is not None:
        role = Role(role)

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            user = request.user
            if not user.is_authenticated:
                return error_response(AuthorizationError("Authentication required"), status=401)
            try:
                check_role, effective = check_level(user, required, role)
            except KYCError as exc:
                return error_response(exc)
            request.verification_role = check_role
            request.verification_level = effective
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator
