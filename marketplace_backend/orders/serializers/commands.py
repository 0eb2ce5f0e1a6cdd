# orders/serializers/commands.py

"""
ORDER COMMAND SERIALIZERS

Input validation only; these serializers do NOT touch the database.
All money is integer paise.
"""

from rest_framework import serializers

from orders.constants import (
    DELIVERY_TYPE_CHOICES,
    DELIVERY_TYPE_SELF,
    MAX_TIP_AMOUNT,
    MIN_TIP_AMOUNT,
    RECIPIENT_TYPE_CHOICES,
)
from orders.models import Order
from orders.services.breakdown import CartLine, CartSnapshot


class CartLineInputSerializer(serializers.Serializer):
    dish_id = serializers.CharField(max_length=64)
    dish_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    unit_price = serializers.IntegerField()
    # Non-positive quantities are accepted and contribute nothing.
    quantity = serializers.IntegerField()
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class CartInputSerializer(serializers.Serializer):
    chef_id = serializers.CharField(max_length=64)
    items = CartLineInputSerializer(many=True, allow_empty=True)
    chef_minimum_order = serializers.IntegerField(min_value=0, required=False, default=0)
    chef_delivery_fee = serializers.IntegerField(min_value=0, required=False, default=0)
    delivery_type = serializers.ChoiceField(
        choices=DELIVERY_TYPE_CHOICES,
        required=False,
        default=DELIVERY_TYPE_SELF,
    )

    def to_cart(self) -> CartSnapshot:
        return cart_from_data(self.validated_data)


def cart_from_data(data: dict) -> CartSnapshot:
    return CartSnapshot(
        chef_id=data["chef_id"],
        lines=tuple(
            CartLine(
                dish_id=line["dish_id"],
                unit_price=line["unit_price"],
                quantity=line["quantity"],
                note=line.get("note", ""),
                dish_name=line.get("dish_name", ""),
            )
            for line in data.get("items", [])
        ),
        chef_minimum_order=data.get("chef_minimum_order", 0),
        chef_delivery_fee=data.get("chef_delivery_fee", 0),
        delivery_type=data.get("delivery_type", DELIVERY_TYPE_SELF),
    )


class QuoteInputSerializer(serializers.Serializer):
    cart = CartInputSerializer()
    promo_code = serializers.CharField(required=False, allow_blank=True, default="", max_length=32)


class PlaceOrderInputSerializer(QuoteInputSerializer):
    delivery_address = serializers.CharField(max_length=1000)


class CancelCommandSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class AdvanceCommandSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)


class AssignDeliveryCommandSerializer(serializers.Serializer):
    partner_id = serializers.CharField(max_length=64)


class TipCommandSerializer(serializers.Serializer):
    recipient_type = serializers.ChoiceField(choices=RECIPIENT_TYPE_CHOICES)
    amount = serializers.IntegerField(min_value=MIN_TIP_AMOUNT, max_value=MAX_TIP_AMOUNT)
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
