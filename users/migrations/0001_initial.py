import django.utils.timezone
from django.db import migrations, models

import users.managers


def trust_level_field():
    return models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        choices=[(0, "L0 (Basic)"), (1, "L1 (ID Verified)"), (2, "L2 (Role Verified)"), (3, "L3 (Trusted/Premium)")],
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="CustomUser",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(
                    default=False,
                    help_text="Designates that this user has all permissions without explicitly assigning them.",
                    verbose_name="superuser status",
                )),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("full_name", models.CharField(blank=True, max_length=150)),
                ("is_verified", models.BooleanField(default=False)),
                ("primary_role", models.CharField(
                    blank=True,
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
                ("is_active", models.BooleanField(default=True)),
                ("is_staff", models.BooleanField(default=False)),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now)),
                ("student_level", trust_level_field()),
                ("mentor_level", trust_level_field()),
                ("employer_level", trust_level_field()),
                ("investor_level", trust_level_field()),
                ("sponsor_level", trust_level_field()),
                ("entrepreneur_level", trust_level_field()),
                ("groups", models.ManyToManyField(
                    blank=True,
                    help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                    related_name="user_set",
                    related_query_name="user",
                    to="auth.group",
                    verbose_name="groups",
                )),
                ("user_permissions", models.ManyToManyField(
                    blank=True,
                    help_text="Specific permissions for this user.",
                    related_name="user_set",
                    related_query_name="user",
                    to="auth.permission",
                    verbose_name="user permissions",
                )),
            ],
            options={
                "abstract": False,
            },
            managers=[
                ("objects", users.managers.CustomUserManager()),
            ],
        ),
    ]
