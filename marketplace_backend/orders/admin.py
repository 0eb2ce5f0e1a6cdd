# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderCancellation, OrderItem, OrderTip


# ======================================================
# ORDER ADMIN
# ======================================================


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("dish_id", "dish_name", "unit_price", "quantity", "note", "line_total")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "status",
        "chef_id",
        "delivery_type",
        "subtotal_amount",
        "total_amount",
        "placed_at",
        "cancellation_deadline",
    )
    readonly_fields = (
        "order_number",
        "subtotal_amount",
        "delivery_fee_amount",
        "tax_amount",
        "promo_code",
        "discount_amount",
        "commission_amount",
        "chef_earnings_amount",
        "total_amount",
        "placed_at",
        "grace_period_seconds",
        "cancellation_deadline",
        "confirmed_at",
        "delivered_at",
        "cancelled_at",
    )
    search_fields = ("order_number", "chef_id", "customer_id")
    list_filter = ("status", "delivery_type", "placed_at")
    inlines = [OrderItemInline]


# ======================================================
# CANCELLATION / TIP ADMIN
# ======================================================


@admin.register(OrderCancellation)
class OrderCancellationAdmin(admin.ModelAdmin):
    list_display = ("order", "refund_amount", "requested_at")
    readonly_fields = ("order", "refund_amount", "reason", "requested_at", "created_at")
    search_fields = ("order__order_number",)


@admin.register(OrderTip)
class OrderTipAdmin(admin.ModelAdmin):
    list_display = ("order", "recipient_type", "recipient_id", "amount", "created_at")
    readonly_fields = ("order", "recipient_type", "recipient_id", "amount", "message", "created_at")
    search_fields = ("order__order_number", "recipient_id")
    list_filter = ("recipient_type",)
