# orders/serializers/order.py

from rest_framework import serializers

from orders.models import Order, OrderCancellation, OrderItem, OrderTip
from orders.services.cancellation_window import is_cancellable, seconds_remaining


class BreakdownSerializer(serializers.Serializer):
    """Read shape of a FinancialBreakdown (quote response)."""

    subtotal = serializers.IntegerField()
    delivery_fee = serializers.IntegerField()
    taxes_and_fees = serializers.IntegerField()
    promo_code = serializers.CharField(allow_blank=True)
    promo_discount = serializers.IntegerField()
    promo_applied = serializers.BooleanField()
    platform_commission = serializers.IntegerField()
    chef_net_earnings = serializers.IntegerField()
    total = serializers.IntegerField()
    meets_minimum = serializers.BooleanField()
    commission_rate = serializers.CharField()


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "dish_id", "dish_name", "unit_price", "quantity", "note", "line_total"]
        read_only_fields = fields


class OrderCancellationSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderCancellation
        fields = ["refund_amount", "reason", "requested_at"]
        read_only_fields = fields


class OrderTipSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderTip
        fields = ["id", "order", "recipient_type", "recipient_id", "amount", "message", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Order read model.

    seconds_remaining / is_cancellable are derived on every read from the
    stored cancellation_deadline; a client countdown should re-sync from
    these values rather than trust its own timer.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    cancellation = serializers.SerializerMethodField()
    tips = OrderTipSerializer(many=True, read_only=True)
    seconds_remaining = serializers.SerializerMethodField()
    is_cancellable = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "chef_id",
            "delivery_partner_id",
            "delivery_type",
            "delivery_address",
            "subtotal_amount",
            "delivery_fee_amount",
            "tax_amount",
            "promo_code",
            "discount_amount",
            "commission_amount",
            "chef_earnings_amount",
            "total_amount",
            "status",
            "placed_at",
            "grace_period_seconds",
            "cancellation_deadline",
            "seconds_remaining",
            "is_cancellable",
            "confirmed_at",
            "delivered_at",
            "cancelled_at",
            "items",
            "cancellation",
            "tips",
        ]
        read_only_fields = fields

    def get_cancellation(self, obj):
        cancellation = getattr(obj, "cancellation", None) if obj.status == Order.STATUS_CANCELLED else None
        if cancellation is None:
            return None
        return OrderCancellationSerializer(cancellation).data

    def get_seconds_remaining(self, obj) -> int:
        if obj.status != Order.STATUS_PLACED:
            return 0
        return seconds_remaining(obj, self.context.get("now"))

    def get_is_cancellable(self, obj) -> bool:
        return is_cancellable(obj, self.context.get("now"))


class CancellationResultSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    status = serializers.CharField()
    refund_amount = serializers.IntegerField()
    cancelled_at = serializers.DateTimeField()
    reason = serializers.CharField(allow_blank=True)
    repeated = serializers.BooleanField()
