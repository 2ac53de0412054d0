"""Serializers for the availability API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import HourRange

from .models import AvailabilityDay, AvailabilityEvent
from .repositories import WRITABLE_STATUSES


class HourRangeSerializer(serializers.Serializer):
    start_time = serializers.RegexField(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")
    end_time = serializers.RegexField(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")

    def validate(self, attrs):  # type: ignore
        try:
            HourRange.parse(attrs)
        except ValueError as exc:
            raise serializers.ValidationError(str(exc))
        return attrs


class AvailabilityDaySerializer(serializers.ModelSerializer):
    class Meta:
        model = AvailabilityDay
        fields = [
            "id",
            "date",
            "status",
            "reason",
            "available_hours",
            "unavailable_hours",
            "on_hold_hours",
            "held_by",
            "held_at",
            "booking_ref",
            "booked_at",
            "updated_at",
        ]
        read_only_fields = fields


class AvailabilityEventSerializer(serializers.ModelSerializer):
    property = serializers.ReadOnlyField(source="property_id")

    class Meta:
        model = AvailabilityEvent
        fields = ["id", "property", "time", "event_type", "booking_ref", "actor_ref", "metadata", "created_at"]
        read_only_fields = fields


class DatesSerializer(serializers.Serializer):
    dates = serializers.ListField(child=serializers.DateField(), allow_empty=False)
    holder = serializers.CharField(max_length=128, required=False, allow_blank=False)


class AcquireHoldSerializer(DatesSerializer):
    ttl = serializers.IntegerField(required=False, min_value=1)


class ConfirmHoldSerializer(DatesSerializer):
    booking_ref = serializers.CharField(max_length=64)
    check_in = serializers.DateTimeField(required=False)
    check_out = serializers.DateTimeField(required=False)
    extension_hours = serializers.IntegerField(required=False, min_value=0, max_value=24, default=0)

    def validate(self, attrs):  # type: ignore
        check_in = attrs.get("check_in")
        check_out = attrs.get("check_out")
        if check_in and check_out and check_in >= check_out:
            raise serializers.ValidationError("Дата заезда должна быть раньше даты выезда.")
        return attrs


class SlotQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    holder = serializers.CharField(max_length=128, required=False)

    def validate(self, attrs):  # type: ignore
        if attrs["start"] >= attrs["end"]:
            raise serializers.ValidationError("start должен быть раньше end.")
        return attrs


class TimelineQuerySerializer(SlotQuerySerializer):
    step_minutes = serializers.IntegerField(required=False, min_value=1, default=60)


class NextSlotQuerySerializer(serializers.Serializer):
    from_time = serializers.DateTimeField(required=False)
    duration_hours = serializers.FloatField(min_value=0.25, default=1)
    horizon_days = serializers.IntegerField(required=False, min_value=1, max_value=366)
    step_minutes = serializers.IntegerField(required=False, min_value=1)
    holder = serializers.CharField(max_length=128, required=False)


class DayUpdateSerializer(serializers.Serializer):
    date = serializers.DateField()
    status = serializers.ChoiceField(choices=[str(s) for s in WRITABLE_STATUSES], default=AvailabilityDay.Status.AVAILABLE)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    available_hours = HourRangeSerializer(many=True, required=False)
    unavailable_hours = HourRangeSerializer(many=True, required=False)
    on_hold_hours = HourRangeSerializer(many=True, required=False)


class BulkDayUpdateSerializer(serializers.Serializer):
    updates = DayUpdateSerializer(many=True, allow_empty=False)


class DayRangeQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError("start_date не может быть позже end_date.")
        return attrs


class BlockPeriodSerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate(self, attrs):  # type: ignore
        if attrs["start"] >= attrs["end"]:
            raise serializers.ValidationError("start должен быть раньше end.")
        return attrs


class BookingTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=["confirmed", "cancelled", "rejected", "expired"])
