from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APITestCase
from rest_framework import status

from accounts.permissions import has_operation_permission

User = get_user_model()


class OperationPermissionTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            password="password", first_name="Admin", last_name="User", is_system_admin=True, is_member=False
        )
        self.member = User.objects.create_user(password="password", first_name="Awa", last_name="Diallo")
        self.other = User.objects.create_user(password="password", first_name="Other", last_name="Member")

    def test_admin_may_run_everything(self):
        for operation in ("record_payment", "record_general_payment", "edit_payment", "view_balance"):
            self.assertTrue(has_operation_permission(self.admin, operation, self.member))

    def test_member_reads_own_data_only(self):
        self.assertTrue(has_operation_permission(self.member, "view_balance", self.member))
        self.assertFalse(has_operation_permission(self.member, "view_balance", self.other))
        self.assertFalse(has_operation_permission(self.member, "record_payment", self.member))

    def test_member_may_be_given_by_primary_key(self):
        self.assertTrue(has_operation_permission(self.member, "view_balance", self.member.pk))
        self.assertTrue(has_operation_permission(self.member, "view_balance", str(self.member.pk)))
        self.assertFalse(has_operation_permission(self.member, "view_balance", self.other.pk))

    def test_anonymous_is_refused(self):
        self.assertFalse(has_operation_permission(AnonymousUser(), "view_balance", self.member))
        self.assertFalse(has_operation_permission(None, "view_balance", self.member))


class TokenViewTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            password="password", first_name="Awa", last_name="Diallo", is_approved=True
        )

    def test_login_returns_token(self):
        response = self.client.post(
            "/api/v1/auth/token/", {"member_no": self.user.member_no, "password": "password"}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("token", response.data)

    def test_unapproved_member_cannot_log_in(self):
        self.user.is_approved = False
        self.user.save()
        response = self.client.post(
            "/api/v1/auth/token/", {"member_no": self.user.member_no, "password": "password"}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_member_numbers_are_generated(self):
        self.assertTrue(self.user.member_no.startswith("MBR"))
