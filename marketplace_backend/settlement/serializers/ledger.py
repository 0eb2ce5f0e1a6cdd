# settlement/serializers/ledger.py

from rest_framework import serializers

from orders.constants import RECIPIENT_TYPE_CHOICES
from settlement.models import LedgerEntry
from settlement.services.reporting import PERIOD_WEEKLY, PERIODS


class LedgerEntrySerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    paid_out = serializers.SerializerMethodField()

    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "order",
            "order_number",
            "recipient_type",
            "recipient_id",
            "amount",
            "platform_fee",
            "earned_at",
            "paid_out",
        ]
        read_only_fields = fields

    def get_paid_out(self, obj) -> bool:
        return hasattr(obj, "payout_line")


class EarningsSummaryQuerySerializer(serializers.Serializer):
    recipient_type = serializers.ChoiceField(choices=RECIPIENT_TYPE_CHOICES, required=False)
    recipient_id = serializers.CharField(required=False, max_length=64)
    period = serializers.ChoiceField(choices=PERIODS, required=False, default=PERIOD_WEEKLY)
    expenses = serializers.IntegerField(required=False, min_value=0, default=0)
