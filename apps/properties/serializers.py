"""Serializers for the properties domain."""

from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rest_framework import serializers  # type: ignore

from .models import Property


class PropertySerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = [
            "id",
            "title",
            "slug",
            "description",
            "status",
            "address_line",
            "timezone",
            "check_in_time",
            "check_out_time",
            "maintenance_buffer_hours",
            "published_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["slug", "published_at", "created_at", "updated_at"]

    def validate_timezone(self, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise serializers.ValidationError("Неизвестный часовой пояс.")
        return value
