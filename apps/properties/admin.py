"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Property


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "status",
        "timezone",
        "check_in_time",
        "check_out_time",
        "maintenance_buffer_hours",
        "created_at",
    )
    list_filter = ("status", "timezone")
    search_fields = ("title", "slug", "address_line")
    prepopulated_fields = {"slug": ("title",)}
    readonly_fields = ("published_at", "created_at", "updated_at")
