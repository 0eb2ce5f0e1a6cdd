# orders/tests/test_api.py

from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.factories import make_cart, make_user, place


class OrderAPITests(TestCase):
    """
    Endpoint contract:
    - quote has no side effects
    - customers place / cancel / tip their own orders
    - chefs advance orders they cook
    - domain refusals use the {"error": {"code": ...}} envelope
    """

    def setUp(self):
        self.client = APIClient()
        self.customer = make_user("customer")
        self.other_customer = make_user("customer")
        self.chef = make_user("chef")

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _cart_payload(self, **overrides):
        payload = {
            "chef_id": str(self.chef.id),
            "items": [{"dish_id": "biryani", "unit_price": 25000, "quantity": 2}],
            "chef_delivery_fee": 3000,
        }
        payload.update(overrides)
        return payload

    def _order_for(self, customer, **kwargs):
        return place(
            make_cart(chef_id=self.chef.id, lines=((30000, 1),)),
            customer_id=str(customer.id),
            **kwargs,
        )

    def _error_code(self, response):
        return response.data["error"]["code"]

    # --------------------------------------------------
    # Quote + placement
    # --------------------------------------------------

    def test_quote(self):
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            "/api/orders/quote/",
            {"cart": self._cart_payload(), "promo_code": "bogus"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["subtotal"], 50000)
        self.assertEqual(response.data["platform_commission"], 7500)
        self.assertFalse(response.data["promo_applied"])
        self.assertFalse(Order.objects.exists())

    def test_place_order(self):
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            "/api/orders/",
            {
                "cart": self._cart_payload(),
                "promo_code": "SAVE50",
                "delivery_address": "221B Residency Road",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["customer_id"], str(self.customer.id))
        self.assertEqual(response.data["status"], Order.STATUS_PLACED)
        # 50000 + 3000 delivery + 2500 tax - 5000 promo
        self.assertEqual(response.data["total_amount"], 50500)
        self.assertTrue(response.data["is_cancellable"])
        self.assertGreaterEqual(response.data["seconds_remaining"], 299)
        self.assertEqual(len(response.data["items"]), 1)

    def test_place_order_keeps_dish_names(self):
        self.client.force_authenticate(self.customer)
        items = [{"dish_id": "biryani", "dish_name": "Chicken Biryani", "unit_price": 25000, "quantity": 2}]

        response = self.client.post(
            "/api/orders/",
            {"cart": self._cart_payload(items=items), "delivery_address": "221B Residency Road"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["items"][0]["dish_name"], "Chicken Biryani")
        order = Order.objects.get(pk=response.data["id"])
        self.assertEqual(order.items.get().dish_name, "Chicken Biryani")

    def test_place_below_minimum(self):
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            "/api/orders/",
            {
                "cart": self._cart_payload(chef_minimum_order=100000),
                "delivery_address": "221B Residency Road",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self._error_code(response), "MINIMUM_ORDER_NOT_MET")

    def test_chef_cannot_place_orders(self):
        self.client.force_authenticate(self.chef)

        response = self.client.post(
            "/api/orders/",
            {"cart": self._cart_payload(), "delivery_address": "x"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_is_rejected(self):
        response = self.client.get("/api/orders/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    # --------------------------------------------------
    # Visibility
    # --------------------------------------------------

    def test_customers_only_see_their_own_orders(self):
        mine = self._order_for(self.customer)
        theirs = self._order_for(self.other_customer)
        self.client.force_authenticate(self.customer)

        listing = self.client.get("/api/orders/")
        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in listing.data["results"]], [str(mine.id)])

        response = self.client.get(f"/api/orders/{theirs.id}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self._error_code(response), "ORDER_NOT_FOUND")

    def test_chef_sees_orders_they_cook(self):
        order = self._order_for(self.customer)
        self.client.force_authenticate(self.chef)

        response = self.client.get(f"/api/orders/{order.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    # --------------------------------------------------
    # Cancel
    # --------------------------------------------------

    def test_cancel_inside_window(self):
        order = self._order_for(self.customer)
        self.client.force_authenticate(self.customer)

        response = self.client.post(f"/api/orders/{order.id}/cancel/", {"reason": "late"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], Order.STATUS_CANCELLED)
        self.assertEqual(response.data["refund_amount"], order.total_amount)
        self.assertFalse(response.data["repeated"])

        again = self.client.post(f"/api/orders/{order.id}/cancel/", {}, format="json")
        self.assertEqual(again.status_code, status.HTTP_200_OK)
        self.assertTrue(again.data["repeated"])

    def test_cancel_after_window(self):
        order = self._order_for(self.customer, placed_at=timezone.now() - timedelta(minutes=10))
        self.client.force_authenticate(self.customer)

        response = self.client.post(f"/api/orders/{order.id}/cancel/", {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(self._error_code(response), "CANCELLATION_WINDOW_EXPIRED")
        self.assertEqual(response.data["error"]["current_status"], Order.STATUS_PLACED)
        self.assertIn("deadline", response.data["error"])

    def test_cannot_cancel_someone_elses_order(self):
        order = self._order_for(self.other_customer)
        self.client.force_authenticate(self.customer)

        response = self.client.post(f"/api/orders/{order.id}/cancel/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    # --------------------------------------------------
    # Advance
    # --------------------------------------------------

    def test_chef_advances_order(self):
        order = self._order_for(self.customer)
        self.client.force_authenticate(self.chef)

        response = self.client.post(f"/api/orders/{order.id}/advance/", {"status": "preparing"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], Order.STATUS_PREPARING)
        self.assertFalse(response.data["is_cancellable"])

        back = self.client.post(f"/api/orders/{order.id}/advance/", {"status": "confirmed"}, format="json")
        self.assertEqual(back.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(self._error_code(back), "INVALID_TRANSITION")

    def test_customer_cannot_advance(self):
        order = self._order_for(self.customer)
        self.client.force_authenticate(self.customer)

        response = self.client.post(f"/api/orders/{order.id}/advance/", {"status": "confirmed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_chef_assigns_delivery_partner(self):
        order = self._order_for(self.customer)
        self.client.force_authenticate(self.chef)

        response = self.client.post(
            f"/api/orders/{order.id}/assign-delivery/",
            {"partner_id": "partner-7"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["delivery_partner_id"], "partner-7")

    # --------------------------------------------------
    # Tips
    # --------------------------------------------------

    def test_tip_chef(self):
        order = self._order_for(self.customer)
        self.client.force_authenticate(self.customer)
        url = f"/api/orders/{order.id}/tips/"

        response = self.client.post(url, {"recipient_type": "chef", "amount": 2000}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["recipient_id"], str(self.chef.id))

        duplicate = self.client.post(url, {"recipient_type": "chef", "amount": 2000}, format="json")
        self.assertEqual(duplicate.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(self._error_code(duplicate), "TIP_ALREADY_EXISTS")

    def test_tip_amount_validation(self):
        order = self._order_for(self.customer)
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            f"/api/orders/{order.id}/tips/",
            {"recipient_type": "chef", "amount": 100},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
