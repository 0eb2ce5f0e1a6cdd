# payouts/tests/test_api.py

from __future__ import annotations

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from orders.tests.factories import delivered_order, local_dt, make_user
from payouts.models import PayoutRecord
from payouts.services.batch_engine import generate_batch
from payouts.tests.helpers import bank_account, weekly_schedule

UNKNOWN_ID = "00000000-0000-0000-0000-000000000000"


class PayoutAPITests(TestCase):
    """
    - admins generate and drive payouts
    - chefs / delivery partners only read their own records
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin")
        self.chef = make_user("chef")
        self.other_chef = make_user("chef")
        self.schedule = weekly_schedule()

        delivered_order(chef_id=self.chef.id, subtotal=70000, delivered_at=local_dt(2024, 1, 9, 13, 0))
        delivered_order(chef_id=self.other_chef.id, subtotal=80000, delivered_at=local_dt(2024, 1, 10, 13, 0))

    def _generate(self):
        return generate_batch(
            recipient_type="chef",
            schedule=self.schedule,
            as_of=local_dt(2024, 1, 12, 10, 0),
        )

    def _record_for(self, user):
        return PayoutRecord.objects.get(recipient_id=str(user.id))

    def _error_code(self, response):
        return response.data["error"]["code"]

    # --------------------------------------------------
    # Generation
    # --------------------------------------------------

    def test_admin_generates_batch(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            "/api/payouts/generate/",
            {"recipient_type": "chef", "as_of": "2024-01-12T10:00:00+05:30"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["count"], 2)
        by_recipient = {r["recipient_id"]: r for r in response.data["results"]}
        mine = by_recipient[str(self.chef.id)]
        self.assertEqual(mine["gross_earnings"], 59500)
        self.assertEqual(mine["net_amount"], 58500)
        self.assertEqual(mine["schedule_version"], 1)
        self.assertEqual(len(mine["lines"]), 1)

    def test_generate_without_schedule(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post("/api/payouts/generate/", {"recipient_type": "delivery"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self._error_code(response), "SCHEDULE_NOT_FOUND")

    def test_chef_cannot_generate(self):
        self.client.force_authenticate(self.chef)

        response = self.client.post("/api/payouts/generate/", {"recipient_type": "chef"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # --------------------------------------------------
    # Visibility
    # --------------------------------------------------

    def test_chef_sees_only_own_records(self):
        self._generate()
        self.client.force_authenticate(self.chef)

        response = self.client.get("/api/payouts/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["recipient_id"], str(self.chef.id))

        other = self._record_for(self.other_chef)
        response = self.client.get(f"/api/payouts/{other.id}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_customer_cannot_list_payouts(self):
        self.client.force_authenticate(make_user("customer"))

        response = self.client.get("/api/payouts/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # --------------------------------------------------
    # Lifecycle
    # --------------------------------------------------

    def test_chef_cannot_process(self):
        self._generate()
        record = self._record_for(self.chef)
        self.client.force_authenticate(self.chef)

        response = self.client.post(f"/api/payouts/{record.id}/process/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_drives_lifecycle(self):
        self._generate()
        bank_account(self.chef.id)
        record = self._record_for(self.chef)
        self.client.force_authenticate(self.admin)

        response = self.client.post(f"/api/payouts/{record.id}/complete/", {"provider_reference": "UTR1"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(self._error_code(response), "INVALID_TRANSITION")
        self.assertEqual(response.data["error"]["current_status"], "pending")

        response = self.client.post(f"/api/payouts/{record.id}/process/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "processing")
        self.assertTrue(response.data["changed"])

        response = self.client.post(f"/api/payouts/{record.id}/fail/", {"reason": "account frozen"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "failed")

        response = self.client.post(f"/api/payouts/{record.id}/retry/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["retry_count"], 1)

        self.client.post(f"/api/payouts/{record.id}/process/")
        response = self.client.post(f"/api/payouts/{record.id}/complete/", {"provider_reference": "UTR2"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "completed")
        self.assertEqual(response.data["provider_reference"], "UTR2")

    def test_process_without_bank_account(self):
        self._generate()
        record = self._record_for(self.chef)
        self.client.force_authenticate(self.admin)

        response = self.client.post(f"/api/payouts/{record.id}/process/")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self._error_code(response), "PAYOUT_ACCOUNT_INVALID")

    def test_unknown_payout(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(f"/api/payouts/{UNKNOWN_ID}/process/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self._error_code(response), "PAYOUT_NOT_FOUND")

    def test_process_bulk_reports_per_record(self):
        self._generate()
        bank_account(self.chef.id)
        self.client.force_authenticate(self.admin)

        response = self.client.post("/api/payouts/process-bulk/", {"recipient_type": "chef"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["processed"], 1)
        self.assertEqual(response.data["failed"], 1)
        codes = sorted(r["error_code"] for r in response.data["results"])
        self.assertEqual(codes, ["", "PAYOUT_ACCOUNT_INVALID"])


class HealthCheckTests(TestCase):
    def test_reports_configured_schedules(self):
        weekly_schedule()

        response = APIClient().get("/api/health/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["db"], "ok")
        self.assertEqual(response.data["payout_schedules"], {"chef": True, "delivery": False})
