import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

PRIORITY_CHOICES = [
    ("NONE", "None"),
    ("SENIOR_CITIZEN", "Senior citizen"),
    ("PREGNANT_WOMEN", "Pregnant women"),
    ("DIFFERENTLY_ABLED", "Differently abled"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("departments", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="SlotHold",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("slot_time", models.CharField(max_length=11)),
                ("priority_type", models.CharField(choices=PRIORITY_CHOICES, default="NONE", max_length=20)),
                ("token_number", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("released_at", models.DateTimeField(blank=True, null=True)),
                (
                    "department",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="slot_holds",
                        to="departments.department",
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="slot_holds",
                        to="departments.service",
                    ),
                ),
            ],
            options={
                "verbose_name": "Slot hold",
                "verbose_name_plural": "Slot holds",
                "indexes": [
                    models.Index(
                        fields=["department", "service", "date", "slot_time"],
                        name="bookings_sl_departm_4c1f2a_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("department", "service", "date", "token_number"),
                        name="slot_hold_unique_token",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="SlotLedger",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("slot_time", models.CharField(max_length=11)),
                ("regular_consumed", models.PositiveIntegerField(default=0)),
                ("priority_consumed", models.PositiveIntegerField(default=0)),
                (
                    "department",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="departments.department",
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="slot_ledgers",
                        to="departments.service",
                    ),
                ),
            ],
            options={
                "verbose_name": "Slot ledger",
                "verbose_name_plural": "Slot ledgers",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("department", "service", "date", "slot_time"),
                        name="slot_ledger_unique_key",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="DailyLedger",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("consumed", models.PositiveIntegerField(default=0)),
                (
                    "department",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="daily_ledgers",
                        to="departments.department",
                    ),
                ),
            ],
            options={
                "verbose_name": "Daily ledger",
                "verbose_name_plural": "Daily ledgers",
                "constraints": [
                    models.UniqueConstraint(fields=("department", "date"), name="daily_ledger_unique_key")
                ],
            },
        ),
        migrations.CreateModel(
            name="TokenSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("last_number", models.PositiveIntegerField(default=0)),
                (
                    "department",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="departments.department",
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="token_sequences",
                        to="departments.service",
                    ),
                ),
            ],
            options={
                "verbose_name": "Token sequence",
                "verbose_name_plural": "Token sequences",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("department", "service", "date"),
                        name="token_sequence_unique_key",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("slot_time", models.CharField(max_length=11)),
                ("token_number", models.PositiveIntegerField()),
                ("priority_type", models.CharField(choices=PRIORITY_CHOICES, default="NONE", max_length=20)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING_DOCS", "Pending documents"),
                            ("DOCS_SUBMITTED", "Documents submitted"),
                            ("UNDER_REVIEW", "Under review"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("COMPLETED", "Completed"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="UNDER_REVIEW",
                        max_length=20,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("rejection_reason", models.CharField(blank=True, max_length=500)),
                ("cancellation_reason", models.CharField(blank=True, max_length=500)),
                (
                    "cancelled_by",
                    models.CharField(blank=True, choices=[("USER", "User"), ("OFFICER", "Officer")], max_length=10),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "department",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="departments.department",
                    ),
                ),
                (
                    "hold",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="booking",
                        to="bookings.slothold",
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="departments.service",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["department", "date", "status"], name="bookings_bo_departm_9a7e31_idx"),
                    models.Index(fields=["user", "-created_at"], name="bookings_bo_user_id_5d02c8_idx"),
                    models.Index(fields=["status"], name="bookings_bo_status_b3e4f0_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("department", "service", "date", "token_number"),
                        name="booking_unique_token",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("document_url", models.CharField(max_length=500)),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")],
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                ("rejection_reason", models.CharField(blank=True, max_length=500)),
                ("uploaded_at", models.DateTimeField()),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="documents",
                        to="bookings.booking",
                    ),
                ),
                (
                    "required_document",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="submissions",
                        to="departments.requireddocument",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking document",
                "verbose_name_plural": "Booking documents",
                "ordering": ["uploaded_at", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(required_document__isnull=False),
                        fields=("booking", "required_document"),
                        name="booking_document_one_per_requirement",
                    )
                ],
            },
        ),
    ]
