# kyc/services.py
"""
Verification store and review workflow.

All writes run inside ``transaction.atomic()`` so a request that dies half way
leaves either the whole write or nothing. The (user, role) uniqueness is a
database constraint; a submission that loses the insert race is retried as an
update of the row the other request created.
"""
import logging

from django.conf import settings
from django.core.paginator import Paginator
from django.db import IntegrityError, OperationalError, transaction
from django.utils import timezone

from .choices import TrustLevel, VerificationStatus
from .crypto import get_cipher, hash_value
from .evidence import evidence_from_dict, parse_evidence, parse_role, protect_sensitive_fields
from .exceptions import ConflictError, NotFoundError, UnavailableError, ValidationError
from .levels import derive_level, resolve_submitted_level
from .models import Verification
from .signals import verification_approved, verification_rejected

logger = logging.getLogger(__name__)

SUBMIT_ATTEMPTS = 2


def _find_for_update(user, role):
    return Verification.objects.select_for_update().filter(user=user, role=role).first()


def find_or_create(user, role):
    """Return ``(verification, created)``; new records start as incomplete."""
    role = parse_role(role)
    try:
        verification = Verification.objects.filter(user=user, role=role).first()
        if verification is not None:
            return verification, False
        try:
            return Verification.objects.create_for(user, role), True
        except ConflictError:
            # created concurrently
            return Verification.objects.get(user=user, role=role), False
    except OperationalError as exc:
        raise UnavailableError() from exc


def _apply_submission(verification, level, requested_level, evidence, now):
    verification.level = int(level)
    verification.requested_level = None if requested_level is None else int(requested_level)
    verification.evidence = evidence
    verification.status = VerificationStatus.PENDING
    verification.submitted_at = now
    verification.reviewed_by = None
    verification.reviewed_at = None
    verification.rejection_reason = ""
    verification.admin_notes = ""


def submit_verification(user, role, payload, requested_level=None):
    """
    Validate, derive, encrypt and upsert a submission.

    Returns ``(verification, created)``. The record is left in ``pending``.
    """
    role = parse_role(role)
    bundle = parse_evidence(role, payload)

    derived = derive_level(role, user.is_verified, bundle)
    try:
        level = resolve_submitted_level(derived, requested_level)
    except ValueError as exc:
        raise ValidationError("Verification level must be 0, 1, 2, or 3", field="verification_level") from exc
    if requested_level is not None and level != derived:
        logger.info(
            "User %s requested L%s for %s; evidence supports L%s",
            user.pk, level, role, derived,
        )

    evidence = protect_sensitive_fields(bundle, get_cipher(), hash_value).to_dict()

    for attempt in range(1, SUBMIT_ATTEMPTS + 1):
        try:
            with transaction.atomic():
                now = timezone.now()
                verification = _find_for_update(user, role)
                created = verification is None
                if created:
                    verification = Verification(user=user, role=role)
                _apply_submission(verification, level, requested_level, evidence, now)
                verification.save(force_insert=created)
        except IntegrityError:
            logger.info(
                "Concurrent first submission for user %s role %s (attempt %s); retrying as update",
                user.pk, role, attempt,
            )
            continue
        except OperationalError as exc:
            logger.error("Verification store unavailable during submission: %s", exc)
            raise UnavailableError() from exc

        logger.info(
            "Verification %s %s for user %s role %s at L%s",
            verification.pk, "created" if created else "resubmitted", user.pk, role, verification.level,
        )
        return verification, created

    raise ConflictError("Could not store the verification, please retry", role=str(role))


def get_verification(pk) -> Verification:
    try:
        return Verification.objects.select_related("user", "reviewed_by").get(pk=pk)
    except (Verification.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Verification not found", id=str(pk)) from None
    except OperationalError as exc:
        raise UnavailableError() from exc


def user_verifications(user, role=None):
    if role:
        role = parse_role(role)
    return Verification.objects.for_user(user, role).order_by("-created_at", "-pk")


def clamp_limit(limit):
    max_limit = getattr(settings, "KYC_ADMIN_MAX_PAGE_SIZE", 100)
    if limit is None:
        limit = getattr(settings, "KYC_ADMIN_PAGE_SIZE", 20)
    return max(1, min(int(limit), max_limit))


def list_for_admin(status=None, role=None, page=1, limit=None):
    """Admin listing, newest submission first. Returns ``(items, pagination)``."""
    if status and status not in VerificationStatus.values:
        raise ValidationError("Invalid status", field="status")
    if role:
        role = parse_role(role)
    page = max(1, int(page or 1))
    limit = clamp_limit(limit)

    paginator = Paginator(Verification.objects.for_admin(status=status, role=role), limit)
    try:
        items = list(paginator.page(page).object_list) if page <= max(paginator.num_pages, 1) else []
        total = paginator.count
    except OperationalError as exc:
        raise UnavailableError() from exc

    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": paginator.num_pages if total else 0,
    }
    return items, pagination


def _check_review_state(verification, allowed, action):
    if verification.status not in allowed:
        raise ConflictError(
            f"Cannot {action} a verification that is {verification.status}",
            id=str(verification.pk),
            status=str(verification.status),
        )


def approve_verification(pk, reviewer, notes=None, level=None) -> Verification:
    """
    Approve a pending verification and write its level into the user's trust cache.

    On ``pending -> approved`` the level is re-derived from the stored evidence;
    a reviewer-supplied ``level`` takes precedence (admins may promote or
    demote). Approving an already approved record keeps its level unless a new
    one is given, so retries leave the same state. Incomplete and rejected
    records raise ConflictError.
    """
    if level is not None:
        try:
            level = TrustLevel.coerce(level)
        except ValueError as exc:
            raise ValidationError("Verification level must be 0, 1, 2, or 3", field="level") from exc

    try:
        with transaction.atomic():
            try:
                verification = (
                    Verification.objects.select_for_update()
                    .select_related("user")
                    .get(pk=pk)
                )
            except (Verification.DoesNotExist, ValueError, TypeError):
                raise NotFoundError("Verification not found", id=str(pk)) from None

            _check_review_state(
                verification, (VerificationStatus.PENDING, VerificationStatus.APPROVED), "approve"
            )

            if level is None and verification.status == VerificationStatus.PENDING:
                rederived = derive_level(
                    verification.role,
                    verification.user.is_verified,
                    evidence_from_dict(verification.role, verification.evidence),
                )
                if rederived != verification.level:
                    logger.warning(
                        "Verification %s stored L%s but evidence supports L%s",
                        verification.pk, verification.level, rederived,
                    )
                level = rederived
            elif level is None:
                level = verification.level

            verification.level = int(level)
            verification.status = VerificationStatus.APPROVED
            verification.reviewed_by = reviewer
            verification.reviewed_at = timezone.now()
            update_fields = ["level", "status", "reviewed_by", "reviewed_at", "updated_at"]
            if notes:
                verification.admin_notes = notes
                update_fields.append("admin_notes")
            verification.save(update_fields=update_fields)

            verification_approved.send(sender=Verification, verification=verification, reviewer=reviewer)
    except OperationalError as exc:
        raise UnavailableError() from exc

    logger.info(
        "Verification %s approved at L%s by %s",
        verification.pk, verification.level, getattr(reviewer, "pk", None),
    )
    return verification


def reject_verification(pk, reviewer, reason, notes=None) -> Verification:
    """Reject a pending verification. The user's trust cache is left alone."""
    if not reason or not str(reason).strip():
        raise ValidationError("Rejection reason is required", field="rejection_reason")

    try:
        with transaction.atomic():
            try:
                verification = Verification.objects.select_for_update().get(pk=pk)
            except (Verification.DoesNotExist, ValueError, TypeError):
                raise NotFoundError("Verification not found", id=str(pk)) from None

            _check_review_state(verification, (VerificationStatus.PENDING,), "reject")

            verification.status = VerificationStatus.REJECTED
            verification.reviewed_by = reviewer
            verification.reviewed_at = timezone.now()
            verification.rejection_reason = str(reason).strip()
            update_fields = ["status", "reviewed_by", "reviewed_at", "rejection_reason", "updated_at"]
            if notes:
                verification.admin_notes = notes
                update_fields.append("admin_notes")
            verification.save(update_fields=update_fields)

            verification_rejected.send(sender=Verification, verification=verification, reviewer=reviewer)
    except OperationalError as exc:
        raise UnavailableError() from exc

    logger.info("Verification %s rejected by %s", verification.pk, getattr(reviewer, "pk", None))
    return verification


def rebuild_trust_cache(user):
    """
    Recompute ``user``'s cache from their approved verifications.

    Returns ``{role: (old, new)}`` for every column that changed.
    """
    from users.models import TRUST_CACHE_FIELDS

    changes = {}
    with transaction.atomic():
        for role, field_name in TRUST_CACHE_FIELDS.items():
            approved = Verification.objects.latest_approved(user, role)
            new = approved.level if approved else None
            old = getattr(user, field_name)
            if old != new:
                changes[role] = (old, new)
                setattr(user, field_name, new)
        if changes:
            user.save(update_fields=[TRUST_CACHE_FIELDS[role] for role in changes])
    return changes
