"""URL routing for the availability engine."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import (
    AcquireHoldView,
    AvailabilityEventListView,
    BlockPeriodView,
    BookingTransitionView,
    CancelBookingView,
    CheckSlotView,
    ConfirmHoldView,
    DaysView,
    ExpireHoldsView,
    NextSlotView,
    ReleaseHoldView,
    TimelineView,
    UnblockPeriodView,
)

urlpatterns = [
    # Holds
    path("properties/<int:property_id>/holds/", AcquireHoldView.as_view(), name="availability-hold-acquire"),
    path("properties/<int:property_id>/holds/confirm/", ConfirmHoldView.as_view(), name="availability-hold-confirm"),
    path("properties/<int:property_id>/holds/release/", ReleaseHoldView.as_view(), name="availability-hold-release"),
    # Bookings
    path(
        "properties/<int:property_id>/bookings/<str:booking_ref>/cancel/",
        CancelBookingView.as_view(),
        name="availability-booking-cancel",
    ),
    path(
        "properties/<int:property_id>/bookings/<str:booking_ref>/transition/",
        BookingTransitionView.as_view(),
        name="availability-booking-transition",
    ),
    # Queries
    path("properties/<int:property_id>/check/", CheckSlotView.as_view(), name="availability-check"),
    path("properties/<int:property_id>/next-slot/", NextSlotView.as_view(), name="availability-next-slot"),
    path("properties/<int:property_id>/timeline/", TimelineView.as_view(), name="availability-timeline"),
    # Calendar management
    path("properties/<int:property_id>/days/", DaysView.as_view(), name="availability-days"),
    path("properties/<int:property_id>/blocks/", BlockPeriodView.as_view(), name="availability-block"),
    path(
        "properties/<int:property_id>/blocks/<str:block_ref>/",
        UnblockPeriodView.as_view(),
        name="availability-unblock",
    ),
    # Administration
    path("events/", AvailabilityEventListView.as_view(), name="availability-event-list"),
    path("sweep/", ExpireHoldsView.as_view(), name="availability-sweep"),
]
