import datetime

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="TokenManagementConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "slot_interval_minutes",
                    models.PositiveSmallIntegerField(
                        default=15,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(1440),
                        ],
                    ),
                ),
                ("slot_start_time", models.TimeField(default=datetime.time(10, 0))),
                ("slot_end_time", models.TimeField(default=datetime.time(17, 0))),
                (
                    "max_daily_tokens",
                    models.PositiveIntegerField(blank=True, help_text="Empty means no daily limit.", null=True),
                ),
                ("max_tokens_per_slot", models.PositiveIntegerField(default=10)),
                (
                    "queue_type",
                    models.CharField(
                        choices=[("Online", "Online"), ("Offline", "Offline"), ("Hybrid", "Hybrid")],
                        default="Hybrid",
                        max_length=10,
                    ),
                ),
                ("allow_priority_tokens", models.BooleanField(default=True)),
                (
                    "priority_percentage",
                    models.PositiveSmallIntegerField(
                        default=0,
                        help_text="Share of each slot reserved for priority citizens, 0-100.",
                        validators=[django.core.validators.MaxValueValidator(100)],
                    ),
                ),
                (
                    "auto_stop_on_overload",
                    models.BooleanField(
                        default=True,
                        help_text="Refuse bookings once the daily limit is reached. When off the limit is advisory.",
                    ),
                ),
            ],
            options={
                "verbose_name": "Token management config",
                "verbose_name_plural": "Token management configs",
            },
        ),
        migrations.CreateModel(
            name="Department",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("category", models.CharField(blank=True, max_length=100)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("inactive", "Inactive"),
                            ("under-maintenance", "Under maintenance"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("is_slot_booking_enabled", models.BooleanField(default=True)),
                (
                    "booking_window_days",
                    models.PositiveSmallIntegerField(
                        default=7,
                        help_text="How many days ahead, today included, citizens may book.",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(30),
                        ],
                    ),
                ),
                ("allow_senior_citizen", models.BooleanField(default=True)),
                ("senior_citizen_age", models.PositiveSmallIntegerField(default=60)),
                ("allow_pregnant_women", models.BooleanField(default=True)),
                ("allow_differently_abled", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "token_config",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="department",
                        to="departments.tokenmanagementconfig",
                    ),
                ),
            ],
            options={
                "verbose_name": "Department",
                "verbose_name_plural": "Departments",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("service_code", models.CharField(max_length=32)),
                ("description", models.TextField(blank=True)),
                ("priority_allowed", models.BooleanField(default=True)),
                ("is_document_upload_required", models.BooleanField(default=True)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "department",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="services",
                        to="departments.department",
                    ),
                ),
                (
                    "token_config",
                    models.OneToOneField(
                        blank=True,
                        help_text="Overrides the department token rules when set.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="service",
                        to="departments.tokenmanagementconfig",
                    ),
                ),
            ],
            options={
                "verbose_name": "Service",
                "verbose_name_plural": "Services",
                "ordering": ["department", "name"],
            },
        ),
        migrations.CreateModel(
            name="RequiredDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("description", models.CharField(blank=True, max_length=500)),
                ("is_mandatory", models.BooleanField(default=True)),
                ("position", models.PositiveSmallIntegerField(default=0)),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="required_documents",
                        to="departments.service",
                    ),
                ),
            ],
            options={
                "verbose_name": "Required document",
                "verbose_name_plural": "Required documents",
                "ordering": ["position", "id"],
            },
        ),
        migrations.CreateModel(
            name="WorkingHours",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "day",
                    models.CharField(
                        choices=[
                            ("Mon", "Monday"),
                            ("Tue", "Tuesday"),
                            ("Wed", "Wednesday"),
                            ("Thu", "Thursday"),
                            ("Fri", "Friday"),
                            ("Sat", "Saturday"),
                            ("Sun", "Sunday"),
                        ],
                        max_length=3,
                    ),
                ),
                ("is_closed", models.BooleanField(default=False)),
                ("open_time", models.TimeField(blank=True, null=True)),
                ("close_time", models.TimeField(blank=True, null=True)),
                (
                    "department",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="working_hours",
                        to="departments.department",
                    ),
                ),
            ],
            options={
                "verbose_name": "Working hours",
                "verbose_name_plural": "Working hours",
            },
        ),
        migrations.AddConstraint(
            model_name="service",
            constraint=models.UniqueConstraint(
                fields=("department", "service_code"), name="service_code_unique_per_department"
            ),
        ),
        migrations.AddConstraint(
            model_name="workinghours",
            constraint=models.UniqueConstraint(fields=("department", "day"), name="working_hours_one_per_day"),
        ),
    ]
