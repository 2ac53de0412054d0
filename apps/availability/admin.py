"""Admin registration for the availability grid and timeline."""

from __future__ import annotations

from django.contrib import admin

from .models import AvailabilityDay, AvailabilityEvent


@admin.register(AvailabilityDay)
class AvailabilityDayAdmin(admin.ModelAdmin):
    list_display = ("property", "date", "status", "held_by", "held_at", "booking_ref", "updated_at")
    list_filter = ("status", "date")
    search_fields = ("property__title", "booking_ref", "held_by")
    date_hierarchy = "date"
    readonly_fields = ("held_by", "held_at", "booking_ref", "booked_at", "created_at", "updated_at")


@admin.register(AvailabilityEvent)
class AvailabilityEventAdmin(admin.ModelAdmin):
    list_display = ("property", "event_type", "time", "booking_ref", "actor_ref")
    list_filter = ("event_type",)
    search_fields = ("property__title", "booking_ref")
    readonly_fields = ("property", "time", "event_type", "booking_ref", "actor_ref", "metadata", "created_at")

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False
