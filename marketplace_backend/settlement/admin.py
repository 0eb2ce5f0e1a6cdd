# settlement/admin.py

from django.contrib import admin

from settlement.models import LedgerEntry


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = ("order", "recipient_type", "recipient_id", "amount", "platform_fee", "earned_at")
    readonly_fields = (
        "order",
        "recipient_type",
        "recipient_id",
        "amount",
        "platform_fee",
        "earned_at",
        "created_at",
    )
    search_fields = ("order__order_number", "recipient_id")
    list_filter = ("recipient_type", "earned_at")

    def has_delete_permission(self, request, obj=None):
        return False
