# users/tests/test_permissions.py

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser, Group
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from permissions.roles import (
    CAP_EARNINGS_VIEW,
    CAP_ORDERS_ADVANCE,
    CAP_ORDERS_PLACE,
    CAP_PAYOUTS_MANAGE,
    HasAnyCapability,
    HasCapability,
    IsAdmin,
    IsEarningRecipient,
    get_user_role,
)

User = get_user_model()


class _View:
    def __init__(self, required_capability=None, required_any_capabilities=None):
        self.required_capability = required_capability
        self.required_any_capabilities = required_any_capabilities


class PermissionRoleTests(TestCase):
    """
    Tests for role / capability permissions.

    GUARANTEES:
    - Correct role access
    - No privilege escalation
    - Anonymous users denied everywhere
    """

    def setUp(self):
        self.factory = APIRequestFactory()

        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.customer = User.objects.create_user(email="customer@example.com", password="pass", role="customer")
        self.chef = User.objects.create_user(email="chef@example.com", password="pass", role="chef")
        self.rider = User.objects.create_user(email="rider@example.com", password="pass", role="delivery")

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _request_for(self, user=None):
        request = self.factory.get("/")
        request.user = user
        return request

    # --------------------------------------------------
    # Roles
    # --------------------------------------------------

    def test_role_resolution(self):
        superuser = User.objects.create_superuser(email="root@example.com", password="pass", role="customer")
        self.assertEqual(get_user_role(superuser), "admin")
        self.assertEqual(get_user_role(self.chef), "chef")
        self.assertIsNone(get_user_role(AnonymousUser()))

    def test_group_fallback(self):
        user = User.objects.create_user(email="grouped@example.com", password="pass", role="")
        user.groups.add(Group.objects.create(name="delivery"))
        self.assertEqual(get_user_role(user), "delivery")

    def test_admin_permissions(self):
        request = self._request_for(self.admin)

        self.assertTrue(IsAdmin().has_permission(request, None))
        self.assertTrue(HasCapability().has_permission(request, _View(CAP_PAYOUTS_MANAGE)))

    def test_earning_recipients(self):
        self.assertTrue(IsEarningRecipient().has_permission(self._request_for(self.chef), None))
        self.assertTrue(IsEarningRecipient().has_permission(self._request_for(self.rider), None))
        self.assertFalse(IsEarningRecipient().has_permission(self._request_for(self.customer), None))
        self.assertFalse(IsAdmin().has_permission(self._request_for(self.chef), None))

    # --------------------------------------------------
    # Capabilities
    # --------------------------------------------------

    def test_capabilities_per_role(self):
        place = _View(CAP_ORDERS_PLACE)
        advance = _View(CAP_ORDERS_ADVANCE)

        self.assertTrue(HasCapability().has_permission(self._request_for(self.customer), place))
        self.assertFalse(HasCapability().has_permission(self._request_for(self.customer), advance))
        self.assertTrue(HasCapability().has_permission(self._request_for(self.chef), advance))
        self.assertFalse(HasCapability().has_permission(self._request_for(self.chef), place))
        self.assertFalse(HasCapability().has_permission(self._request_for(self.rider), _View(CAP_PAYOUTS_MANAGE)))

    def test_missing_capability_denies_by_default(self):
        self.assertFalse(HasCapability().has_permission(self._request_for(self.admin), _View()))
        self.assertFalse(HasAnyCapability().has_permission(self._request_for(self.admin), _View()))

    def test_any_capability(self):
        view = _View(required_any_capabilities={CAP_EARNINGS_VIEW, CAP_PAYOUTS_MANAGE})

        self.assertTrue(HasAnyCapability().has_permission(self._request_for(self.rider), view))
        self.assertFalse(HasAnyCapability().has_permission(self._request_for(self.customer), view))

    def test_anonymous_denied(self):
        request = self._request_for(AnonymousUser())

        self.assertFalse(IsAdmin().has_permission(request, None))
        self.assertFalse(IsEarningRecipient().has_permission(request, None))
        self.assertFalse(HasCapability().has_permission(request, _View(CAP_ORDERS_PLACE)))
