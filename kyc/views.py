from django.views.decorators.http import require_GET, require_POST

from .crypto import get_cipher
from .evidence import mask_sensitive_fields, reveal_sensitive_fields
from .forms import AdminListForm, ApproveForm, RejectForm, StatusFilterForm, SubmissionForm
from .http import (
    api_admin_required,
    api_login_required,
    api_view,
    form_error,
    parse_json_body,
    success_response,
)
from . import services


def _isoformat(value):
    return value.isoformat() if value else None


def serialize_verification(verification, evidence=None):
    data = {
        "id": verification.pk,
        "user_id": verification.user_id,
        "role": verification.role,
        "level": verification.level,
        "requested_level": verification.requested_level,
        "status": verification.status,
        "submitted_at": _isoformat(verification.submitted_at),
        "reviewed_by": verification.reviewed_by_id,
        "reviewed_at": _isoformat(verification.reviewed_at),
        "rejection_reason": verification.rejection_reason or None,
        "admin_notes": verification.admin_notes or None,
        "created_at": _isoformat(verification.created_at),
        "updated_at": _isoformat(verification.updated_at),
    }
    if evidence is not None:
        data["evidence"] = evidence
    return data


def serialize_user(user):
    return {"id": user.pk, "email": user.email, "full_name": user.full_name, "primary_role": user.primary_role}


@require_POST
@api_login_required
@api_view
def submit_verification_view(request):
    """
    Submit (or resubmit) the evidence bundle for one role.
    Body: {"role": ..., "verification_level": optional, ...sections}
    """
    body = parse_json_body(request)
    form = SubmissionForm(data={"role": body.pop("role", None),
                                "verification_level": body.pop("verification_level", None)})
    if not form.is_valid():
        raise form_error(form)

    verification, created = services.submit_verification(
        request.user,
        form.cleaned_data["role"],
        body,
        requested_level=form.cleaned_data["verification_level"],
    )
    evidence = mask_sensitive_fields(verification.evidence, get_cipher())
    return success_response(
        {"verification": serialize_verification(verification, evidence), "created": created},
        message="Verification submitted successfully",
        status=201,
    )


@require_GET
@api_login_required
@api_view
def verification_status_view(request):
    form = StatusFilterForm(data=request.GET)
    if not form.is_valid():
        raise form_error(form)

    cipher = get_cipher()
    verifications = [
        serialize_verification(v, mask_sensitive_fields(v.evidence, cipher))
        for v in services.user_verifications(request.user, form.cleaned_data["role"] or None)
    ]
    return success_response({"verifications": verifications, "trust_levels": request.user.trust_levels})


@require_GET
@api_admin_required
@api_view
def admin_verification_list_view(request):
    """
    Admin-only: all submissions, filtered by status/role, newest first
    """
    form = AdminListForm(data=request.GET)
    if not form.is_valid():
        raise form_error(form)

    items, pagination = services.list_for_admin(
        status=form.cleaned_data["status"] or None,
        role=form.cleaned_data["role"] or None,
        page=form.cleaned_data["page"] or 1,
        limit=form.cleaned_data["limit"],
    )
    verifications = []
    for v in items:
        data = serialize_verification(v)
        data["user"] = serialize_user(v.user)
        verifications.append(data)
    return success_response({"verifications": verifications, "pagination": pagination})


@require_GET
@api_admin_required
@api_view
def admin_verification_detail_view(request, pk):
    """
    Admin-only: one submission with sensitive fields decrypted
    """
    verification = services.get_verification(pk)
    data = serialize_verification(verification, reveal_sensitive_fields(verification.evidence, get_cipher()))
    data["user"] = serialize_user(verification.user)
    return success_response({"verification": data})


@require_POST
@api_admin_required
@api_view
def approve_verification_view(request, pk):
    """
    Admin approves a submission; the level lands in the user's trust cache
    """
    form = ApproveForm(data=parse_json_body(request))
    if not form.is_valid():
        raise form_error(form)

    verification = services.approve_verification(
        pk,
        request.user,
        notes=form.cleaned_data["admin_notes"] or None,
        level=form.cleaned_data["level"],
    )
    return success_response(
        {"verification": serialize_verification(verification)},
        message="Verification approved successfully",
    )


@require_POST
@api_admin_required
@api_view
def reject_verification_view(request, pk):
    """
    Admin rejects a submission with a reason; the user may submit again
    """
    form = RejectForm(data=parse_json_body(request))
    if not form.is_valid():
        raise form_error(form)

    verification = services.reject_verification(
        pk,
        request.user,
        form.cleaned_data["rejection_reason"],
        notes=form.cleaned_data["admin_notes"] or None,
    )
    return success_response(
        {"verification": serialize_verification(verification)},
        message="Verification rejected successfully",
    )
