from django.contrib import admin, messages

from .exceptions import KYCError
from .models import Verification
from .services import approve_verification


@admin.action(description="Approve selected verifications (update user trust levels)")
def approve_verifications(modeladmin, request, queryset):
    for v in queryset:
        try:
            approved = approve_verification(v.pk, request.user, notes=f"Approved from admin site by {request.user}")
            messages.info(request, f"Approved verification {v.pk} at L{approved.level}")
        except KYCError as e:
            messages.error(request, f"Error approving {v.pk}: {e}")


@admin.register(Verification)
class VerificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'role', 'level', 'requested_level', 'status', 'submitted_at', 'reviewed_by', 'reviewed_at')
    list_filter = ('status', 'role', 'level')
    search_fields = ('user__email',)
    # review state only changes through the review workflow
    readonly_fields = ('user', 'role', 'level', 'requested_level', 'status', 'evidence', 'submitted_at',
                       'reviewed_by', 'reviewed_at', 'rejection_reason', 'created_at', 'updated_at')
    actions = [approve_verifications]
