"""Tests for the property scheduling profile."""

from __future__ import annotations

from datetime import time

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.availability.repositories import PropertyDirectory
from apps.properties.models import Property

User = get_user_model()


class PropertyModelTests(TestCase):
    def test_defaults(self) -> None:
        prop = Property.objects.create(title="Дом у озера")
        self.assertEqual(prop.check_in_time, time(14, 0))
        self.assertEqual(prop.check_out_time, time(11, 0))
        self.assertEqual(prop.maintenance_buffer_hours, 2)
        self.assertEqual(prop.status, Property.Status.ACTIVE)

    @override_settings(AVAILABILITY_DEFAULT_BUFFER_HOURS=4)
    def test_default_buffer_follows_settings(self) -> None:
        self.assertEqual(Property.objects.create(title="Лофт").maintenance_buffer_hours, 4)

    def test_slug_is_unique(self) -> None:
        first = Property.objects.create(title="Loft")
        second = Property.objects.create(title="Loft")
        self.assertEqual(first.slug, "loft")
        self.assertEqual(second.slug, "loft-2")

    def test_unknown_timezone(self) -> None:
        with self.assertRaises(ValidationError):
            Property(title="X", timezone="Nowhere/City").clean()

    def test_buffer_range_constraint(self) -> None:
        with self.assertRaises(IntegrityError), transaction.atomic():
            Property.objects.create(title="Без перерыва", maintenance_buffer_hours=0)

    def test_activation(self) -> None:
        prop = Property.objects.create(title="Черновик", status=Property.Status.DRAFT)
        prop.activate()
        self.assertEqual(prop.status, Property.Status.ACTIVE)
        self.assertIsNotNone(prop.published_at)
        prop.deactivate()
        self.assertEqual(prop.status, Property.Status.INACTIVE)

    def test_profile_for_engine(self) -> None:
        prop = Property.objects.create(title="Студия", timezone="Asia/Tokyo", maintenance_buffer_hours=3)
        profile = PropertyDirectory().profile(prop.pk)
        self.assertEqual(str(profile.zone), "Asia/Tokyo")
        self.assertEqual(profile.buffer_hours, 3)
        self.assertEqual(profile.check_out_time, time(11, 0))


class PropertyAPITests(APITestCase):
    def setUp(self) -> None:
        self.staff = User.objects.create_user(username="host", password="HostPass123", is_staff=True)
        self.guest = User.objects.create_user(username="guest", password="GuestPass123")
        self.list_url = reverse("property-list")

    def payload(self, **overrides) -> dict:
        data = {
            "title": "Апартаменты",
            "timezone": "Asia/Almaty",
            "check_in_time": "15:00",
            "check_out_time": "10:00",
            "maintenance_buffer_hours": 3,
        }
        data.update(overrides)
        return data

    def test_staff_can_create(self) -> None:
        self.client.force_authenticate(self.staff)
        response = self.client.post(self.list_url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(Property.objects.get().check_in_time, time(15, 0))

    def test_guest_cannot_create(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(self.list_url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_validation(self) -> None:
        self.client.force_authenticate(self.staff)
        bad_zone = self.client.post(self.list_url, self.payload(timezone="Nowhere/City"), format="json")
        self.assertEqual(bad_zone.status_code, status.HTTP_400_BAD_REQUEST)
        bad_buffer = self.client.post(self.list_url, self.payload(maintenance_buffer_hours=13), format="json")
        self.assertEqual(bad_buffer.status_code, status.HTTP_400_BAD_REQUEST)

    def test_public_list_with_filter(self) -> None:
        Property.objects.create(title="Tokyo", timezone="Asia/Tokyo")
        Property.objects.create(title="Almaty", timezone="Asia/Almaty")
        response = self.client.get(self.list_url, {"timezone": "Asia/Tokyo"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["title"] for item in response.data["results"]], ["Tokyo"])

    def test_deactivate_action(self) -> None:
        prop = Property.objects.create(title="Active")
        self.client.force_authenticate(self.staff)
        response = self.client.post(reverse("property-deactivate", args=[prop.pk]))
        self.assertEqual(response.data, {"status": "inactive"})
