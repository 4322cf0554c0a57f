import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

TRUST_LEVEL_CHOICES = [(0, "L0 (Basic)"), (1, "L1 (ID Verified)"), (2, "L2 (Role Verified)"), (3, "L3 (Trusted/Premium)")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Verification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(
                    db_index=True,
                    max_length=20,
                    choices=[
                        ("student", "Student"),
                        ("mentor", "Mentor"),
                        ("employer", "Employer"),
                        ("investor", "Investor"),
                        ("sponsor", "Sponsor"),
                        ("entrepreneur", "Entrepreneur"),
                    ],
                )),
                ("level", models.PositiveSmallIntegerField(choices=TRUST_LEVEL_CHOICES, default=0)),
                ("requested_level", models.PositiveSmallIntegerField(blank=True, choices=TRUST_LEVEL_CHOICES, null=True)),
                ("status", models.CharField(
                    db_index=True,
                    default="incomplete",
                    max_length=20,
                    choices=[
                        ("incomplete", "Incomplete"),
                        ("pending", "Pending"),
                        ("approved", "Approved"),
                        ("rejected", "Rejected"),
                    ],
                )),
                ("evidence", models.JSONField(blank=True, default=dict)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("admin_notes", models.TextField(blank=True)),
                ("submitted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("reviewed_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="reviewed_verifications",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("user", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="verifications",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "ordering": ["-submitted_at"],
                "indexes": [models.Index(fields=["status", "role"], name="kyc_status_role_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "role"), name="unique_verification_per_user_role"),
                ],
            },
        ),
    ]
