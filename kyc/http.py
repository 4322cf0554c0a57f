# kyc/http.py
import json
import logging
from functools import wraps

from django.db import OperationalError
from django.http import JsonResponse
from django.views.csrf import csrf_failure as django_csrf_failure

from .exceptions import AuthorizationError, KYCError, UnavailableError, ValidationError

logger = logging.getLogger(__name__)


def success_response(data=None, message=None, status=200):
    body = {"success": True}
    if message:
        body["message"] = message
    body["data"] = data or {}
    return JsonResponse(body, status=status)


def error_response(exc: KYCError, status=None):
    status = status or exc.status_code
    if status >= 500:
        logger.error("%s: %s", exc.code, exc.message)
    else:
        logger.warning("%s: %s", exc.code, exc.message)
    return JsonResponse({"success": False, "error": exc.as_dict()}, status=status)


def parse_json_body(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON") from None
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def form_error(form):
    """First form error as a ValidationError, with every field error attached."""
    errors = {key: [str(e) for e in errs] for key, errs in form.errors.items()}
    first = next(iter(errors.values()))[0]
    return ValidationError(first, errors=errors)


def api_view(view_func):
    """Translate verification errors into the JSON error envelope."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except KYCError as exc:
            return error_response(exc)
        except OperationalError:
            logger.exception("Database unavailable in %s", view_func.__name__)
            return error_response(UnavailableError())

    return _wrapped


def api_login_required(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response(AuthorizationError("Authentication required"), status=401)
        return view_func(request, *args, **kwargs)

    return _wrapped


def admin_required(user):
    return user.is_staff or user.is_superuser


def api_admin_required(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response(AuthorizationError("Authentication required"), status=401)
        if not admin_required(request.user):
            return error_response(AuthorizationError("Admin access required"))
        return view_func(request, *args, **kwargs)

    return _wrapped


def csrf_failure(request, reason=""):
    """JSON 403 for API callers; the admin site keeps Django's HTML page."""
    if not request.path.startswith("/api/"):
        return django_csrf_failure(request, reason=reason)
    return error_response(AuthorizationError("CSRF token missing or incorrect", reason=reason))
