"""API views for the availability engine."""

from __future__ import annotations

import logging
from datetime import timedelta

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import generics, permissions, status  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .application.engine import build_engine
from .exceptions import (
    AvailabilityError,
    ExpiredHoldError,
    NotFoundError,
    PartialFailureError,
    StateConflictError,
    ValidationError,
)
from .filters import AvailabilityEventFilterSet
from .models import AvailabilityEvent
from .serializers import (
    AcquireHoldSerializer,
    AvailabilityDaySerializer,
    AvailabilityEventSerializer,
    BlockPeriodSerializer,
    BookingTransitionSerializer,
    BulkDayUpdateSerializer,
    ConfirmHoldSerializer,
    DatesSerializer,
    DayRangeQuerySerializer,
    NextSlotQuerySerializer,
    SlotQuerySerializer,
    TimelineQuerySerializer,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StateConflictError: status.HTTP_409_CONFLICT,
    PartialFailureError: status.HTTP_409_CONFLICT,
    ExpiredHoldError: status.HTTP_410_GONE,
}


class EngineAPIView(APIView):
    """Base view: builds the engine and renders engine errors as JSON."""

    permission_classes = [permissions.IsAuthenticated]

    def get_engine(self):
        return build_engine()

    def handle_exception(self, exc):  # type: ignore
        if isinstance(exc, AvailabilityError):
            code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
            if code == status.HTTP_409_CONFLICT:
                logger.warning(f"{self.__class__.__name__}: {exc.message}")
            return Response(exc.to_dict(), status=code)
        return super().handle_exception(exc)

    def holder_for(self, request, data: dict) -> str:
        """Guests always act as themselves; staff may act for another holder."""
        own = f"user-{request.user.pk}"
        holder = data.get("holder")
        if not holder or holder == own:
            return own
        if not request.user.is_staff:
            logger.warning(f"User {request.user.pk} tried to act as holder {holder}")
            raise PermissionDenied("Only staff may act on behalf of another holder")
        return holder

    def validated(self, serializer_class, data):
        serializer = serializer_class(data=data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


# ----------------------------------------------------------------------
# Holds
# ----------------------------------------------------------------------


class AcquireHoldView(EngineAPIView):
    @extend_schema(request=AcquireHoldSerializer, responses={200: dict, 409: dict})
    def post(self, request, property_id: int):  # type: ignore
        data = self.validated(AcquireHoldSerializer, request.data)
        result = self.get_engine().acquire_hold(
            property_id, data["dates"], self.holder_for(request, data), ttl=data.get("ttl")
        )
        code = status.HTTP_200_OK if result.success else status.HTTP_409_CONFLICT
        return Response(result.to_dict(), status=code)


class ConfirmHoldView(EngineAPIView):
    @extend_schema(request=ConfirmHoldSerializer, responses={201: dict})
    def post(self, request, property_id: int):  # type: ignore
        data = self.validated(ConfirmHoldSerializer, request.data)
        result = self.get_engine().confirm_hold(
            property_id,
            data["dates"],
            self.holder_for(request, data),
            data["booking_ref"],
            check_in=data.get("check_in"),
            check_out=data.get("check_out"),
            extension_hours=data.get("extension_hours", 0),
            actor_ref=f"user-{request.user.pk}",
        )
        return Response(result.to_dict(), status=status.HTTP_201_CREATED)


class ReleaseHoldView(EngineAPIView):
    @extend_schema(request=DatesSerializer, responses={200: dict})
    def post(self, request, property_id: int):  # type: ignore
        data = self.validated(DatesSerializer, request.data)
        released = self.get_engine().release_hold(property_id, data["dates"], self.holder_for(request, data))
        return Response({"released": released})


# ----------------------------------------------------------------------
# Bookings
# ----------------------------------------------------------------------


class CancelBookingView(EngineAPIView):
    permission_classes = [permissions.IsAdminUser]

    @extend_schema(request=None, responses={200: dict})
    def post(self, request, property_id: int, booking_ref: str):  # type: ignore
        result = self.get_engine().cancel_booking(property_id, booking_ref)
        return Response(result.to_dict())


class BookingTransitionView(EngineAPIView):
    permission_classes = [permissions.IsAdminUser]

    @extend_schema(request=BookingTransitionSerializer, responses={200: dict})
    def post(self, request, property_id: int, booking_ref: str):  # type: ignore
        data = self.validated(BookingTransitionSerializer, request.data)
        result = self.get_engine().handle_booking_transition(property_id, booking_ref, data["status"])
        return Response({"status": data["status"], "result": result.to_dict() if result else None})


# ----------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------


class CheckSlotView(EngineAPIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[SlotQuerySerializer], responses={200: dict})
    def get(self, request, property_id: int):  # type: ignore
        data = self.validated(SlotQuerySerializer, request.query_params)
        result = self.get_engine().check_slot(property_id, data["start"], data["end"], holder=data.get("holder"))
        return Response(result.to_dict())


class NextSlotView(EngineAPIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[NextSlotQuerySerializer], responses={200: dict})
    def get(self, request, property_id: int):  # type: ignore
        data = self.validated(NextSlotQuerySerializer, request.query_params)
        options = {"horizon_days": data.get("horizon_days"), "holder": data.get("holder")}
        if data.get("step_minutes"):
            options["step"] = timedelta(minutes=data["step_minutes"])
        result = self.get_engine().find_next(property_id, data.get("from_time"), data["duration_hours"], **options)
        return Response(result.to_dict())


class TimelineView(EngineAPIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[TimelineQuerySerializer], responses={200: dict})
    def get(self, request, property_id: int):  # type: ignore
        data = self.validated(TimelineQuerySerializer, request.query_params)
        timeline = self.get_engine().get_timeline(
            property_id, data["start"], data["end"], step=timedelta(minutes=data["step_minutes"])
        )
        return Response(timeline.to_dict())


# ----------------------------------------------------------------------
# Calendar management
# ----------------------------------------------------------------------


class DaysView(EngineAPIView):
    def get_permissions(self):  # type: ignore
        if self.request.method == "GET":
            return [permissions.AllowAny()]
        return [permissions.IsAdminUser()]

    @extend_schema(parameters=[DayRangeQuerySerializer], responses={200: AvailabilityDaySerializer(many=True)})
    def get(self, request, property_id: int):  # type: ignore
        data = self.validated(DayRangeQuerySerializer, request.query_params)
        days = self.get_engine().get_days(property_id, data["start_date"], data["end_date"])
        return Response(AvailabilityDaySerializer(days, many=True).data)

    @extend_schema(request=BulkDayUpdateSerializer, responses={200: dict, 409: dict})
    def post(self, request, property_id: int):  # type: ignore
        data = self.validated(BulkDayUpdateSerializer, request.data)
        updates = [dict(update) for update in data["updates"]]
        result = self.get_engine().update_days(property_id, updates)
        code = status.HTTP_200_OK if result.success else status.HTTP_409_CONFLICT
        return Response(result.to_dict(), status=code)


class BlockPeriodView(EngineAPIView):
    permission_classes = [permissions.IsAdminUser]

    @extend_schema(request=BlockPeriodSerializer, responses={201: dict})
    def post(self, request, property_id: int):  # type: ignore
        data = self.validated(BlockPeriodSerializer, request.data)
        block_ref = self.get_engine().block_period(
            property_id,
            data["start"],
            data["end"],
            actor_ref=f"user-{request.user.pk}",
            reason=data.get("reason", ""),
        )
        return Response({"block_ref": block_ref}, status=status.HTTP_201_CREATED)


class UnblockPeriodView(EngineAPIView):
    permission_classes = [permissions.IsAdminUser]

    @extend_schema(request=None, responses={200: dict})
    def delete(self, request, property_id: int, block_ref: str):  # type: ignore
        removed = self.get_engine().unblock_period(property_id, block_ref)
        return Response({"events_deleted": removed})


class ExpireHoldsView(EngineAPIView):
    """Administrative trigger for the hold sweep."""

    permission_classes = [permissions.IsAdminUser]

    @extend_schema(request=None, responses={200: dict})
    def post(self, request):  # type: ignore
        result = self.get_engine().expire_holds()
        return Response(result.to_dict())


class AvailabilityEventListView(generics.ListAPIView):
    queryset = AvailabilityEvent.objects.all()
    serializer_class = AvailabilityEventSerializer
    permission_classes = [permissions.IsAdminUser]
    filter_backends = [DjangoFilterBackend]
    filterset_class = AvailabilityEventFilterSet
