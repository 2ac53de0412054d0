"""FilterSet definitions for the event timeline listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import AvailabilityEvent


class AvailabilityEventFilterSet(django_filters.FilterSet):
    property = django_filters.NumberFilter(field_name="property_id", lookup_expr="exact")
    booking_ref = django_filters.CharFilter(field_name="booking_ref", lookup_expr="exact")
    event_type = django_filters.MultipleChoiceFilter(choices=AvailabilityEvent.EventType.choices)
    time_after = django_filters.IsoDateTimeFilter(field_name="time", lookup_expr="gte")
    time_before = django_filters.IsoDateTimeFilter(field_name="time", lookup_expr="lt")

    class Meta:
        model = AvailabilityEvent
        fields = ["property", "booking_ref", "event_type"]
