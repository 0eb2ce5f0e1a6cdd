# payouts/serializers/payout.py

from rest_framework import serializers

from orders.constants import RECIPIENT_TYPE_CHOICES
from payouts.models import PayoutLine, PayoutRecord


class PayoutLineSerializer(serializers.ModelSerializer):
    order = serializers.UUIDField(source="ledger_entry.order_id", read_only=True)
    earned_at = serializers.DateTimeField(source="ledger_entry.earned_at", read_only=True)

    class Meta:
        model = PayoutLine
        fields = ["id", "ledger_entry", "order", "amount", "earned_at"]
        read_only_fields = fields


class PayoutRecordSerializer(serializers.ModelSerializer):
    schedule_version = serializers.IntegerField(source="schedule.version", read_only=True)
    is_overdue = serializers.SerializerMethodField()
    lines = PayoutLineSerializer(many=True, read_only=True)

    class Meta:
        model = PayoutRecord
        fields = [
            "id",
            "recipient_type",
            "recipient_id",
            "schedule",
            "schedule_version",
            "period_start",
            "period_end",
            "gross_earnings",
            "platform_fee_already_deducted",
            "processing_fee",
            "net_amount",
            "status",
            "due_date",
            "is_overdue",
            "processed_at",
            "completed_at",
            "failed_at",
            "failure_reason",
            "provider_reference",
            "retry_count",
            "created_at",
            "lines",
        ]
        read_only_fields = fields

    def get_is_overdue(self, obj) -> bool:
        return obj.is_overdue(self.context.get("now"))


class PayoutProcessResultSerializer(serializers.Serializer):
    payout_id = serializers.CharField()
    status = serializers.CharField()
    changed = serializers.BooleanField()
    ok = serializers.BooleanField()
    error = serializers.CharField(allow_blank=True)
    error_code = serializers.CharField(allow_blank=True)


class GenerateBatchCommandSerializer(serializers.Serializer):
    recipient_type = serializers.ChoiceField(choices=RECIPIENT_TYPE_CHOICES)
    as_of = serializers.DateTimeField(required=False)


class ProcessBulkCommandSerializer(serializers.Serializer):
    recipient_type = serializers.ChoiceField(choices=RECIPIENT_TYPE_CHOICES)


class CompletePayoutCommandSerializer(serializers.Serializer):
    provider_reference = serializers.CharField(max_length=128)


class FailPayoutCommandSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000)
