from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APITestCase
from rest_framework import status

from duetypes.models import DueType

User = get_user_model()


class DueTypeApiTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            password="password", first_name="Admin", last_name="User", is_system_admin=True, is_member=False
        )
        self.member = User.objects.create_user(password="password", first_name="Awa", last_name="Diallo")
        self.url = "/api/v1/duetypes/"

    def test_admin_creates_due_type(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(self.url, {"name": "Membership", "standard_amount": "15.00"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(DueType.objects.get().standard_amount, Decimal("15.00"))

    def test_names_are_unique(self):
        DueType.objects.create(name="Membership", standard_amount=Decimal("15.00"))
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(self.url, {"name": "Membership", "standard_amount": "10.00"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_member_can_only_read(self):
        DueType.objects.create(name="Membership", standard_amount=Decimal("15.00"))
        self.client.force_authenticate(user=self.member)
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_200_OK)
        response = self.client.post(self.url, {"name": "Hall", "standard_amount": "5.00"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
