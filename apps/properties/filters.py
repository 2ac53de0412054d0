"""FilterSet definitions for property listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Property


class PropertyFilterSet(django_filters.FilterSet):
    title = django_filters.CharFilter(field_name="title", lookup_expr="icontains")
    timezone = django_filters.CharFilter(field_name="timezone", lookup_expr="exact")
    buffer_min = django_filters.NumberFilter(field_name="maintenance_buffer_hours", lookup_expr="gte")
    buffer_max = django_filters.NumberFilter(field_name="maintenance_buffer_hours", lookup_expr="lte")

    class Meta:
        model = Property
        fields = ["status", "timezone"]
