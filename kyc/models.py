from django.conf import settings
from django.db import IntegrityError, models, transaction

from .choices import Role, TrustLevel, VerificationStatus
from .exceptions import ConflictError

User = settings.AUTH_USER_MODEL


class VerificationQuerySet(models.QuerySet):
    def for_user(self, user, role=None):
        qs = self.filter(user=user)
        if role:
            qs = qs.filter(role=role)
        return qs

    def approved(self):
        return self.filter(status=VerificationStatus.APPROVED)

    def latest_approved(self, user, role):
        return (
            self.for_user(user, role)
            .approved()
            .order_by("-reviewed_at", "-pk")
            .first()
        )

    def for_admin(self, status=None, role=None):
        qs = self.select_related("user", "reviewed_by")
        if status:
            qs = qs.filter(status=status)
        if role:
            qs = qs.filter(role=role)
        return qs.order_by("-submitted_at", "-pk")

    def sharing_id_number(self, digest):
        return self.filter(evidence__id_proof__number_hash=digest)


class VerificationManager(models.Manager.from_queryset(VerificationQuerySet)):
    def create_for(self, user, role, **fields):
        """Insert the (user, role) record; a second one raises ConflictError."""
        try:
            with transaction.atomic():
                return self.create(user=user, role=role, **fields)
        except IntegrityError as exc:
            raise ConflictError(
                "A verification for this user and role already exists",
                role=str(role),
            ) from exc


class Verification(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="verifications")
    role = models.CharField(max_length=20, choices=Role.choices, db_index=True)
    level = models.PositiveSmallIntegerField(choices=TrustLevel.choices, default=TrustLevel.L0)
    # level the client asked for, advisory only
    requested_level = models.PositiveSmallIntegerField(choices=TrustLevel.choices, null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=VerificationStatus.choices,
        default=VerificationStatus.INCOMPLETE,
        db_index=True,
    )
    evidence = models.JSONField(default=dict, blank=True)

    reviewed_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="reviewed_verifications"
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    admin_notes = models.TextField(blank=True)

    submitted_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = VerificationManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "role"], name="unique_verification_per_user_role"),
        ]
        indexes = [
            models.Index(fields=["status", "role"], name="kyc_status_role_idx"),
        ]
        ordering = ["-submitted_at"]

    def __str__(self):
        return f"KYC - {self.user.email} [{self.role}] L{self.level} ({self.get_status_display()})"

    @property
    def trust_level(self):
        return TrustLevel.coerce(self.level)

    @property
    def is_approved(self):
        return self.status == VerificationStatus.APPROVED
