from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET
from kyc.choices import TrustLevel
from kyc.gate import require_level
from kyc.http import api_login_required, success_response


def profile_data(user):
    return {
        "id": user.pk,
        "email": user.email,
        "full_name": user.full_name,
        "primary_role": user.primary_role or None,
        "is_verified": user.is_verified,
        "trust_levels": user.trust_levels,
    }


@require_GET
@api_login_required
@ensure_csrf_cookie
def profile_view(request):
    return success_response({"user": profile_data(request.user)})


@require_GET
@require_level(TrustLevel.L3)
def premium_zone_view(request):
    """Trusted/Premium area (startup creation, fund management) for the user's primary role."""
    return success_response({
        "role": request.verification_role.value,
        "level": int(request.verification_level),
    })
