from django.contrib import admin
from .models import CustomUser, TRUST_CACHE_FIELDS


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ('id', 'email', 'full_name', 'primary_role', 'is_verified', 'is_active', 'is_staff', 'date_joined')
    list_filter = ('primary_role', 'is_verified', 'is_staff')
    search_fields = ('email', 'full_name')
    # the trust cache is written by the review workflow only
    readonly_fields = tuple(TRUST_CACHE_FIELDS.values())
    exclude = ('password',)
