"""Property domain models.

Объект недвижимости хранит только то, что нужно движку доступности:
часовой пояс, время заезда/выезда по умолчанию и длительность
технического перерыва после выезда.
"""

from __future__ import annotations

from datetime import time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

MIN_BUFFER_HOURS = 1
MAX_BUFFER_HOURS = 12


def default_timezone() -> str:
    return settings.TIME_ZONE


def default_buffer_hours() -> int:
    return getattr(settings, "AVAILABILITY_DEFAULT_BUFFER_HOURS", 2)


class Property(models.Model):
    """Объект недвижимости, доступный для бронирования."""

    class Status(models.TextChoices):
        DRAFT = "draft", _("Черновик")
        ACTIVE = "active", _("Активен")
        INACTIVE = "inactive", _("Неактивен")

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    address_line = models.CharField(max_length=255, blank=True)
    timezone = models.CharField(
        max_length=64,
        default=default_timezone,
        help_text=_("IANA часовой пояс объекта, например Asia/Almaty."),
    )
    check_in_time = models.TimeField(default=time(14, 0))
    check_out_time = models.TimeField(default=time(11, 0))
    maintenance_buffer_hours = models.PositiveSmallIntegerField(
        default=default_buffer_hours,
        validators=[MinValueValidator(MIN_BUFFER_HOURS), MaxValueValidator(MAX_BUFFER_HOURS)],
        help_text=_("Часы на уборку и подготовку после выезда гостя (1-12)."),
    )
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Объект недвижимости")
        verbose_name_plural = _("Объекты недвижимости")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(maintenance_buffer_hours__gte=MIN_BUFFER_HOURS)
                & models.Q(maintenance_buffer_hours__lte=MAX_BUFFER_HOURS),
                name="property_buffer_hours_range",
            ),
        ]
        indexes = [
            models.Index(fields=["status"], name="property_status_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    def clean(self) -> None:
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError({"timezone": _("Неизвестный часовой пояс.")})

    def activate(self) -> None:
        if self.status != self.Status.ACTIVE:
            self.status = self.Status.ACTIVE
            self.published_at = timezone.now()
            self.save(update_fields=["status", "published_at"])

    def deactivate(self) -> None:
        if self.status == self.Status.ACTIVE:
            self.status = self.Status.INACTIVE
            self.save(update_fields=["status"])

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base_slug = slugify(self.title)[:200] or "property"
            candidate = base_slug
            counter = 1
            while self.__class__.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
                counter += 1
                candidate = f"{base_slug}-{counter}"
            self.slug = candidate
        super().save(*args, **kwargs)
