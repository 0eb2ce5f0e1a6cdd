# settlement/tests/test_api.py

from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from orders.tests.factories import delivered_order, make_user


class SettlementAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin")
        self.chef = make_user("chef")
        self.other_chef = make_user("chef")

        recent = timezone.now() - timedelta(hours=1)
        delivered_order(chef_id=self.chef.id, subtotal=20000, delivered_at=recent)
        delivered_order(chef_id=self.chef.id, subtotal=10000, delivered_at=recent)
        delivered_order(chef_id=self.other_chef.id, subtotal=40000, delivered_at=recent)

    # --------------------------------------------------
    # Ledger
    # --------------------------------------------------

    def test_chef_sees_only_own_ledger(self):
        self.client.force_authenticate(self.chef)

        response = self.client.get("/api/settlement/ledger/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)
        self.assertEqual(
            {row["recipient_id"] for row in response.data["results"]},
            {str(self.chef.id)},
        )
        self.assertEqual(sorted(row["amount"] for row in response.data["results"]), [8500, 17000])
        self.assertFalse(response.data["results"][0]["paid_out"])

    def test_chef_cannot_widen_ledger_with_filter(self):
        self.client.force_authenticate(self.chef)

        response = self.client.get("/api/settlement/ledger/", {"recipient_id": str(self.other_chef.id)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 0)

    def test_admin_filters_by_recipient(self):
        self.client.force_authenticate(self.admin)

        response = self.client.get("/api/settlement/ledger/", {"recipient_id": str(self.other_chef.id)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["amount"], 34000)

    def test_customer_is_forbidden(self):
        self.client.force_authenticate(make_user("customer"))

        response = self.client.get("/api/settlement/ledger/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_date_filter(self):
        self.client.force_authenticate(self.chef)

        response = self.client.get("/api/settlement/ledger/", {"from": "15-01-2024"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "INVALID_DATE")

    def test_date_window_excludes_older_entries(self):
        self.client.force_authenticate(self.chef)
        tomorrow = (timezone.localdate() + timedelta(days=1)).isoformat()

        response = self.client.get("/api/settlement/ledger/", {"from": tomorrow})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 0)

    # --------------------------------------------------
    # Summary
    # --------------------------------------------------

    def test_summary_infers_recipient_type(self):
        self.client.force_authenticate(self.chef)

        response = self.client.get("/api/settlement/summary/", {"period": "weekly"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["recipient_type"], "chef")
        self.assertEqual(response.data["recipient_id"], str(self.chef.id))
        self.assertEqual(response.data["order_count"], 2)
        self.assertEqual(response.data["gross_sales"], 30000)
        self.assertEqual(response.data["platform_fees"], 4500)
        self.assertEqual(response.data["net_earnings"], 25500)

    def test_summary_for_another_recipient_is_forbidden(self):
        self.client.force_authenticate(self.chef)

        response = self.client.get("/api/settlement/summary/", {"recipient_id": str(self.other_chef.id)})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"]["code"], "FORBIDDEN")

    def test_admin_must_name_recipient_type(self):
        self.client.force_authenticate(self.admin)

        response = self.client.get("/api/settlement/summary/", {"recipient_id": str(self.chef.id)})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "RECIPIENT_TYPE_REQUIRED")

        response = self.client.get(
            "/api/settlement/summary/",
            {"recipient_id": str(self.chef.id), "recipient_type": "chef"},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["net_earnings"], 25500)
