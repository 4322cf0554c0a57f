from django.apps import AppConfig


class KycConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "kyc"
    verbose_name = "Identity verification"

    def ready(self):
        from . import signals  # noqa: F401
        from .crypto import check_configuration

        check_configuration()
