"""Availability grid and event timeline models.

``AvailabilityDay`` is the coarse per-day index used by search and
calendars. ``AvailabilityEvent`` is the append-only timeline used for
sub-day conflict checks and maintenance buffers.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import HourRange


class AvailabilityDay(models.Model):
    """Статус объекта на конкретную календарную дату."""

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Свободно")
        ON_HOLD = "on-hold", _("Временно удержано")
        BOOKED = "booked", _("Забронировано")
        BLOCKED = "blocked", _("Заблокировано владельцем")
        UNAVAILABLE = "unavailable", _("Недоступно")
        PARTIALLY_AVAILABLE = "partially-available", _("Частично доступно")

    # Derived at query time from checkout + buffer, never stored.
    MAINTENANCE = "maintenance"

    HOUR_FIELDS = ("available_hours", "unavailable_hours", "on_hold_hours")

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="availability_days",
    )
    date = models.DateField()
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.AVAILABLE)
    reason = models.CharField(max_length=255, blank=True)
    available_hours = models.JSONField(default=list, blank=True)
    unavailable_hours = models.JSONField(default=list, blank=True)
    on_hold_hours = models.JSONField(default=list, blank=True)
    held_by = models.CharField(max_length=128, blank=True)
    held_at = models.DateTimeField(null=True, blank=True)
    booking_ref = models.CharField(max_length=64, blank=True)
    booked_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("День доступности")
        verbose_name_plural = _("Дни доступности")
        ordering = ["property_id", "date"]
        constraints = [
            models.UniqueConstraint(fields=["property", "date"], name="availability_day_unique"),
            models.CheckConstraint(
                condition=(
                    models.Q(status="on-hold", held_at__isnull=False)
                    | (~models.Q(status="on-hold") & models.Q(held_at__isnull=True, held_by=""))
                ),
                name="availability_day_hold_fields",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(status="booked", booked_at__isnull=False)
                    | (~models.Q(status="booked") & models.Q(booked_at__isnull=True, booking_ref=""))
                ),
                name="availability_day_booking_fields",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "held_at"], name="availability_day_hold_idx"),
            models.Index(fields=["property", "booking_ref"], name="availability_day_booking_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.property_id} {self.date} ({self.status})"

    def hour_ranges(self, field_name: str) -> list[HourRange]:
        return [HourRange.parse(item) for item in getattr(self, field_name) or []]

    def clean(self) -> None:
        for field_name in self.HOUR_FIELDS:
            try:
                self.hour_ranges(field_name)
            except (KeyError, TypeError, ValueError) as exc:
                raise ValidationError({field_name: str(exc)})


class AvailabilityEvent(models.Model):
    """Событие временной шкалы: начало или конец интервала занятости."""

    class EventType(models.TextChoices):
        RESERVATION_START = "reservation_start", _("Начало бронирования")
        RESERVATION_END = "reservation_end", _("Конец бронирования")
        MAINTENANCE_START = "maintenance_start", _("Начало обслуживания")
        MAINTENANCE_END = "maintenance_end", _("Конец обслуживания")
        BLOCK_START = "block_start", _("Начало блокировки")
        BLOCK_END = "block_end", _("Конец блокировки")

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="availability_events",
    )
    time = models.DateTimeField()
    event_type = models.CharField(max_length=32, choices=EventType.choices)
    booking_ref = models.CharField(max_length=64)
    actor_ref = models.CharField(max_length=128, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Событие доступности")
        verbose_name_plural = _("События доступности")
        ordering = ["time", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["property", "booking_ref", "event_type"],
                name="availability_event_unique_per_ref",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "time"], name="availability_event_time_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.property_id} {self.event_type} @ {self.time.isoformat()}"
