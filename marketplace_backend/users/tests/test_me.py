# users/tests/test_me.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

User = get_user_model()


class MeViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_me_returns_role_and_capabilities(self):
        chef = User.objects.create_user(email="chef@example.com", password="pass", role="chef")
        self.client.force_authenticate(chef)

        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["role"], "chef")
        self.assertEqual(response.data["recipient_id"], str(chef.id))
        self.assertIn("earnings.view", response.data["capabilities"])
        self.assertNotIn("orders.place", response.data["capabilities"])

    def test_username_shortcut(self):
        user = User.objects.create_user(username="Rider1", password="pass", role="delivery")
        self.assertEqual(user.email, "rider1@local.test")
        self.assertEqual(user.recipient_id, str(user.id))

    def test_jwt_login(self):
        User.objects.create_user(email="cust@example.com", password="pass")

        response = self.client.post(
            "/api/auth/jwt/create/",
            {"email": "cust@example.com", "password": "pass"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("access", response.data)
