import datetime

import django.core.validators
from django.db import migrations, models

import apps.properties.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Property",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("slug", models.SlugField(blank=True, max_length=255, unique=True)),
                ("description", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Черновик"), ("active", "Активен"), ("inactive", "Неактивен")],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("address_line", models.CharField(blank=True, max_length=255)),
                (
                    "timezone",
                    models.CharField(
                        default=apps.properties.models.default_timezone,
                        help_text="IANA часовой пояс объекта, например Asia/Almaty.",
                        max_length=64,
                    ),
                ),
                ("check_in_time", models.TimeField(default=datetime.time(14, 0))),
                ("check_out_time", models.TimeField(default=datetime.time(11, 0))),
                (
                    "maintenance_buffer_hours",
                    models.PositiveSmallIntegerField(
                        default=apps.properties.models.default_buffer_hours,
                        help_text="Часы на уборку и подготовку после выезда гостя (1-12).",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(12),
                        ],
                    ),
                ),
                ("published_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Объект недвижимости",
                "verbose_name_plural": "Объекты недвижимости",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status"], name="property_status_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("maintenance_buffer_hours__gte", 1), ("maintenance_buffer_hours__lte", 12)),
                        name="property_buffer_hours_range",
                    )
                ],
            },
        ),
    ]
