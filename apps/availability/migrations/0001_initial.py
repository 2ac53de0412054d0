import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("properties", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AvailabilityDay",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Свободно"),
                            ("on-hold", "Временно удержано"),
                            ("booked", "Забронировано"),
                            ("blocked", "Заблокировано владельцем"),
                            ("unavailable", "Недоступно"),
                            ("partially-available", "Частично доступно"),
                        ],
                        default="available",
                        max_length=32,
                    ),
                ),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("available_hours", models.JSONField(blank=True, default=list)),
                ("unavailable_hours", models.JSONField(blank=True, default=list)),
                ("on_hold_hours", models.JSONField(blank=True, default=list)),
                ("held_by", models.CharField(blank=True, max_length=128)),
                ("held_at", models.DateTimeField(blank=True, null=True)),
                ("booking_ref", models.CharField(blank=True, max_length=64)),
                ("booked_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability_days",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "День доступности",
                "verbose_name_plural": "Дни доступности",
                "ordering": ["property_id", "date"],
                "indexes": [
                    models.Index(fields=["status", "held_at"], name="availability_day_hold_idx"),
                    models.Index(fields=["property", "booking_ref"], name="availability_day_booking_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("property", "date"), name="availability_day_unique"),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("status", "on-hold"), ("held_at__isnull", False)),
                            models.Q(
                                models.Q(("status", "on-hold"), _negated=True),
                                models.Q(("held_at__isnull", True), ("held_by", "")),
                            ),
                            _connector="OR",
                        ),
                        name="availability_day_hold_fields",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("status", "booked"), ("booked_at__isnull", False)),
                            models.Q(
                                models.Q(("status", "booked"), _negated=True),
                                models.Q(("booked_at__isnull", True), ("booking_ref", "")),
                            ),
                            _connector="OR",
                        ),
                        name="availability_day_booking_fields",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AvailabilityEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("time", models.DateTimeField()),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("reservation_start", "Начало бронирования"),
                            ("reservation_end", "Конец бронирования"),
                            ("maintenance_start", "Начало обслуживания"),
                            ("maintenance_end", "Конец обслуживания"),
                            ("block_start", "Начало блокировки"),
                            ("block_end", "Конец блокировки"),
                        ],
                        max_length=32,
                    ),
                ),
                ("booking_ref", models.CharField(max_length=64)),
                ("actor_ref", models.CharField(blank=True, max_length=128)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability_events",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Событие доступности",
                "verbose_name_plural": "События доступности",
                "ordering": ["time", "id"],
                "indexes": [
                    models.Index(fields=["property", "time"], name="availability_event_time_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("property", "booking_ref", "event_type"),
                        name="availability_event_unique_per_ref",
                    ),
                ],
            },
        ),
    ]
