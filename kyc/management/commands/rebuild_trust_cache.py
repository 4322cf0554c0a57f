# kyc/management/commands/rebuild_trust_cache.py
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from kyc.services import rebuild_trust_cache

User = get_user_model()


class Command(BaseCommand):
    help = "Recompute every user's per-role trust cache from their approved verifications."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Report changes without saving them.")
        parser.add_argument("--email", help="Only rebuild the cache of this user.")

    def handle(self, *args, **options):
        users = User.objects.order_by("pk")
        if options["email"]:
            users = users.filter(email__iexact=options["email"])

        changed = 0
        for user in users.iterator():
            with transaction.atomic():
                changes = rebuild_trust_cache(user)
                if changes and options["dry_run"]:
                    transaction.set_rollback(True)
            for role, (old, new) in sorted(changes.items()):
                changed += 1
                self.stdout.write(f"{user.email} [{role}]: {old} -> {new}")

        verb = "Would update" if options["dry_run"] else "Updated"
        self.stdout.write(self.style.SUCCESS(f"{verb} {changed} cached level(s)"))
