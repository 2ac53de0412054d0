"""Integration tests for availability API endpoints."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.availability.models import AvailabilityDay, AvailabilityEvent
from apps.properties.models import Property

User = get_user_model()
Status = AvailabilityDay.Status


class AvailabilityAPITests(APITestCase):
    """Covers удержание, подтверждение, отмену и календарь через API."""

    def setUp(self) -> None:
        self.guest = User.objects.create_user(username="guest", password="GuestPass123")
        self.other_guest = User.objects.create_user(username="other", password="OtherPass123")
        self.staff = User.objects.create_user(username="host", password="HostPass123", is_staff=True)
        self.property = Property.objects.create(title="Современная квартира", timezone="UTC")
        self.day = date.today() + timedelta(days=30)
        self.next_day = self.day + timedelta(days=1)
        for day in (self.day, self.next_day):
            AvailabilityDay.objects.create(property=self.property, date=day)

    def url(self, name: str, **kwargs) -> str:
        return reverse(name, kwargs={"property_id": self.property.pk, **kwargs})

    def at(self, day: date, hour: int) -> str:
        return datetime.combine(day, time(hour), tzinfo=timezone.utc).isoformat()

    def acquire(self, user, days=None):
        self.client.force_authenticate(user)
        payload = {"dates": [str(d) for d in (days or [self.day])]}
        return self.client.post(self.url("availability-hold-acquire"), payload, format="json")

    def test_hold_requires_authentication(self) -> None:
        response = self.client.post(self.url("availability-hold-acquire"), {"dates": [str(self.day)]}, format="json")
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_hold_conflict_returns_outcomes(self) -> None:
        first = self.acquire(self.guest)
        self.assertEqual(first.status_code, status.HTTP_200_OK, first.data)
        self.assertTrue(first.data["success"])

        second = self.acquire(self.other_guest, [self.day, self.next_day])

        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT, second.data)
        outcomes = {item["date"]: item["ok"] for item in second.data["outcomes"]}
        self.assertEqual(outcomes, {str(self.day): False, str(self.next_day): True})

    def test_confirm_and_cancel(self) -> None:
        self.acquire(self.guest)
        response = self.client.post(
            self.url("availability-hold-confirm"),
            {"dates": [str(self.day)], "booking_ref": "BK-100"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["booking_ref"], "BK-100")
        self.assertEqual(AvailabilityEvent.objects.filter(booking_ref="BK-100").count(), 4)

        self.client.force_authenticate(self.staff)
        cancel = self.client.post(self.url("availability-booking-cancel", booking_ref="BK-100"), format="json")
        self.assertEqual(cancel.status_code, status.HTTP_200_OK, cancel.data)
        self.assertEqual(cancel.data["days_released"], 1)
        self.assertFalse(AvailabilityEvent.objects.exists())

    def test_confirm_by_other_holder_conflicts(self) -> None:
        self.acquire(self.guest)
        self.client.force_authenticate(self.other_guest)
        response = self.client.post(
            self.url("availability-hold-confirm"),
            {"dates": [str(self.day)], "booking_ref": "BK-1"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "state_conflict")

    def test_guest_cannot_act_as_another_holder(self) -> None:
        self.acquire(self.guest)
        owner = f"user-{self.guest.pk}"
        self.client.force_authenticate(self.other_guest)

        release = self.client.post(
            self.url("availability-hold-release"), {"dates": [str(self.day)], "holder": owner}, format="json"
        )
        confirm = self.client.post(
            self.url("availability-hold-confirm"),
            {"dates": [str(self.day)], "booking_ref": "BK-X", "holder": owner},
            format="json",
        )

        self.assertEqual(release.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(confirm.status_code, status.HTTP_403_FORBIDDEN)
        record = AvailabilityDay.objects.get(date=self.day)
        self.assertEqual((record.status, record.held_by), (Status.ON_HOLD, owner))

    def test_staff_may_act_for_holder(self) -> None:
        self.acquire(self.guest)
        self.client.force_authenticate(self.staff)
        response = self.client.post(
            self.url("availability-hold-release"),
            {"dates": [str(self.day)], "holder": f"user-{self.guest.pk}"},
            format="json",
        )
        self.assertEqual(response.data, {"released": 1})

    def test_confirm_missing_day_is_404(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(
            self.url("availability-hold-confirm"),
            {"dates": [str(self.day + timedelta(days=10))], "booking_ref": "BK-1"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)

    def test_release(self) -> None:
        self.acquire(self.guest)
        response = self.client.post(self.url("availability-hold-release"), {"dates": [str(self.day)]}, format="json")
        self.assertEqual(response.data, {"released": 1})
        self.assertEqual(AvailabilityDay.objects.get(date=self.day).status, Status.AVAILABLE)

    def test_check_slot_is_public(self) -> None:
        response = self.client.get(
            self.url("availability-check"),
            {"start": self.at(self.day, 10), "end": self.at(self.day, 12)},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["available"])

    def test_check_slot_validates_range(self) -> None:
        response = self.client.get(
            self.url("availability-check"),
            {"start": self.at(self.day, 12), "end": self.at(self.day, 10)},
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_property_is_404(self) -> None:
        url = reverse("availability-check", kwargs={"property_id": self.property.pk + 50})
        response = self.client.get(url, {"start": self.at(self.day, 10), "end": self.at(self.day, 12)})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "not_found")

    def test_next_slot_and_timeline(self) -> None:
        self.client.force_authenticate(self.staff)
        block = self.client.post(
            self.url("availability-block"),
            {"start": self.at(self.day, 0), "end": self.at(self.day, 9), "reason": "Уборка"},
            format="json",
        )
        self.assertEqual(block.status_code, status.HTTP_201_CREATED, block.data)

        next_slot = self.client.get(
            self.url("availability-next-slot"),
            {"from_time": self.at(self.day, 0), "duration_hours": 2},
        )
        self.assertTrue(next_slot.data["found"], next_slot.data)
        self.assertEqual(next_slot.data["start"], self.at(self.day, 9))

        timeline = self.client.get(
            self.url("availability-timeline"),
            {"start": self.at(self.day, 8), "end": self.at(self.day, 10)},
        )
        self.assertEqual([s["status"] for s in timeline.data["slots"]], ["blocked", "available"])

        unblock = self.client.delete(self.url("availability-unblock", block_ref=block.data["block_ref"]))
        self.assertEqual(unblock.data, {"events_deleted": 2})

    def test_calendar_updates_require_staff(self) -> None:
        payload = {"updates": [{"date": str(self.day + timedelta(days=5)), "status": "available"}]}
        self.client.force_authenticate(self.guest)
        forbidden = self.client.post(self.url("availability-days"), payload, format="json")
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.staff)
        response = self.client.post(self.url("availability-days"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        listing = self.client.get(
            self.url("availability-days"),
            {"start_date": str(self.day), "end_date": str(self.day + timedelta(days=5))},
        )
        self.assertEqual(len(listing.data), 3)

    def test_calendar_update_with_hours(self) -> None:
        self.client.force_authenticate(self.staff)
        payload = {
            "updates": [
                {
                    "date": str(self.day),
                    "status": "partially-available",
                    "available_hours": [{"start_time": "09:00", "end_time": "18:00"}],
                    "unavailable_hours": [{"start_time": "13:00", "end_time": "14:00"}],
                }
            ]
        }
        response = self.client.post(self.url("availability-days"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        lunch = self.client.get(
            self.url("availability-check"),
            {"start": datetime.combine(self.day, time(13, 30), tzinfo=timezone.utc).isoformat(), "end": self.at(self.day, 15)},
        )
        self.assertFalse(lunch.data["available"])

    def test_booking_transition(self) -> None:
        self.acquire(self.guest)
        self.client.post(
            self.url("availability-hold-confirm"),
            {"dates": [str(self.day)], "booking_ref": "BK-7"},
            format="json",
        )
        self.client.force_authenticate(self.staff)
        response = self.client.post(
            self.url("availability-booking-transition", booking_ref="BK-7"),
            {"status": "rejected"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["result"]["days_released"], 1)

    def test_sweep_endpoint_is_admin_only(self) -> None:
        self.client.force_authenticate(self.guest)
        self.assertEqual(self.client.post(reverse("availability-sweep")).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.staff)
        response = self.client.post(reverse("availability-sweep"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["cleaned_count"], 0)

    def test_event_list_filters(self) -> None:
        self.acquire(self.guest)
        self.client.post(
            self.url("availability-hold-confirm"),
            {"dates": [str(self.day)], "booking_ref": "BK-9"},
            format="json",
        )
        self.client.force_authenticate(self.staff)
        response = self.client.get(
            reverse("availability-event-list"),
            {"booking_ref": "BK-9", "event_type": "maintenance_start"},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["event_type"], "maintenance_start")
