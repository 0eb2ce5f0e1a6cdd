# payouts/admin.py

from django.contrib import admin

from payouts.models import PayoutAccount, PayoutLine, PayoutRecord, PayoutSchedule


# ======================================================
# SCHEDULE ADMIN
# ======================================================


@admin.register(PayoutSchedule)
class PayoutScheduleAdmin(admin.ModelAdmin):
    """New versions only; existing versions are read-only."""

    list_display = (
        "recipient_type",
        "version",
        "frequency",
        "anchor_day",
        "minimum_amount",
        "processing_fee",
        "is_active",
        "created_at",
    )
    list_filter = ("recipient_type", "frequency", "is_active")

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return [f.name for f in self.model._meta.fields]
        return ["version", "created_at"]

    def save_model(self, request, obj, form, change):
        if change:
            return
        latest = PayoutSchedule.latest_for(obj.recipient_type)
        obj.version = (latest.version + 1) if latest is not None else 1
        super().save_model(request, obj, form, change)

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PayoutAccount)
class PayoutAccountAdmin(admin.ModelAdmin):
    list_display = (
        "recipient_type",
        "recipient_id",
        "bank_name",
        "account_number_masked",
        "ifsc_code",
        "is_verified",
    )
    search_fields = ("recipient_id", "account_holder_name")
    list_filter = ("recipient_type", "is_verified")


# ======================================================
# PAYOUT RECORD ADMIN
# ======================================================


class PayoutLineInline(admin.TabularInline):
    model = PayoutLine
    extra = 0
    can_delete = False
    readonly_fields = ("ledger_entry", "amount", "created_at")


@admin.register(PayoutRecord)
class PayoutRecordAdmin(admin.ModelAdmin):
    list_display = (
        "recipient_type",
        "recipient_id",
        "period_start",
        "period_end",
        "gross_earnings",
        "net_amount",
        "status",
        "due_date",
    )
    readonly_fields = (
        "recipient_type",
        "recipient_id",
        "schedule",
        "period_start",
        "period_end",
        "gross_earnings",
        "platform_fee_already_deducted",
        "processing_fee",
        "net_amount",
        "status",
        "due_date",
        "processed_at",
        "completed_at",
        "failed_at",
        "failure_reason",
        "provider_reference",
        "retry_count",
        "created_at",
    )
    search_fields = ("recipient_id", "provider_reference")
    list_filter = ("recipient_type", "status", "period_end")
    inlines = [PayoutLineInline]

    def has_delete_permission(self, request, obj=None):
        return False
