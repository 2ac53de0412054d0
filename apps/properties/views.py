"""Property API views."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from .filters import PropertyFilterSet
from .models import Property
from .serializers import PropertySerializer


class IsStaffOrReadOnly(permissions.BasePermission):
    """Читать могут все, изменять профиль объекта только персонал."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)


class PropertyViewSet(viewsets.ModelViewSet):
    """CRUD for properties and their scheduling profile."""

    queryset = Property.objects.all()
    serializer_class = PropertySerializer
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = ["created_at", "title"]

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):  # type: ignore
        property_obj: Property = self.get_object()  # type: ignore
        property_obj.activate()
        return Response({"status": property_obj.status})

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):  # type: ignore
        property_obj: Property = self.get_object()  # type: ignore
        property_obj.deactivate()
        return Response({"status": property_obj.status})
