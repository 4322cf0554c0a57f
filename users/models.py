from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.utils import timezone
from kyc.choices import Role, TrustLevel
from .managers import CustomUserManager


# one cache column per role; written only when an admin approves a verification
TRUST_CACHE_FIELDS = {
    Role.STUDENT.value: "student_level",
    Role.MENTOR.value: "mentor_level",
    Role.EMPLOYER.value: "employer_level",
    Role.INVESTOR.value: "investor_level",
    Role.SPONSOR.value: "sponsor_level",
    Role.ENTREPRENEUR.value: "entrepreneur_level",
}


def trust_level_field():
    return models.PositiveSmallIntegerField(choices=TrustLevel.choices, null=True, blank=True)


class CustomUser(AbstractBaseUser, PermissionsMixin):
    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=150, blank=True)
    is_verified = models.BooleanField(default=False)        # email verified
    primary_role = models.CharField(max_length=20, choices=Role.choices, blank=True)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)

    # per-role trust cache
    student_level = trust_level_field()
    mentor_level = trust_level_field()
    employer_level = trust_level_field()
    investor_level = trust_level_field()
    sponsor_level = trust_level_field()
    entrepreneur_level = trust_level_field()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    def __str__(self):
        return self.email

    def get_cached_level(self, role):
        """Cached TrustLevel for ``role`` or None. A value outside 0..3 raises ValueError."""
        value = getattr(self, TRUST_CACHE_FIELDS[Role(role).value])
        if value is None:
            return None
        return TrustLevel.coerce(value)

    def set_cached_level(self, role, level):
        field_name = TRUST_CACHE_FIELDS[Role(role).value]
        setattr(self, field_name, int(TrustLevel.coerce(level)))
        self.save(update_fields=[field_name])

    @property
    def trust_levels(self):
        return {role: getattr(self, name) for role, name in TRUST_CACHE_FIELDS.items()}
