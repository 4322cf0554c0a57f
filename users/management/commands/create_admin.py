# users/management/commands/create_admin.py
import getpass

from django.core.management.base import BaseCommand, CommandError
from users.models import CustomUser


class Command(BaseCommand):
    help = "Create (or promote) an admin account allowed to review verifications."

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("--full-name", default="Admin")
        parser.add_argument("--password", help="Prompted for when omitted.")

    def handle(self, *args, **options):
        email = options["email"].strip().lower()
        password = options["password"] or getpass.getpass("Password: ")
        if not password:
            raise CommandError("A password is required")

        user = CustomUser.objects.filter(email=email).first()
        if user:
            user.is_staff = True
            user.is_superuser = True
            user.is_verified = True
            user.set_password(password)
            user.save()
            self.stdout.write(self.style.WARNING(f"Promoted existing user {email} to admin"))
            return

        CustomUser.objects.create_superuser(email=email, password=password, full_name=options["full_name"])
        self.stdout.write(self.style.SUCCESS(f"Created admin {email}"))
