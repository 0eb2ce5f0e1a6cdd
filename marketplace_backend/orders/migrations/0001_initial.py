"""
PATH: orders/migrations/0001_initial.py

MIGRATION: CREATE Order, OrderItem, OrderCancellation, OrderTip
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "order_number",
                    models.CharField(
                        blank=True,
                        help_text="System-generated human order number",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("customer_id", models.CharField(blank=True, db_index=True, default="", max_length=64)),
                ("chef_id", models.CharField(db_index=True, max_length=64)),
                (
                    "delivery_partner_id",
                    models.CharField(blank=True, db_index=True, max_length=64, null=True),
                ),
                (
                    "delivery_type",
                    models.CharField(
                        choices=[("self", "Chef delivers"), ("third_party", "Third-party partner")],
                        default="self",
                        max_length=16,
                    ),
                ),
                ("delivery_address", models.TextField()),
                ("subtotal_amount", models.BigIntegerField(default=0)),
                ("delivery_fee_amount", models.BigIntegerField(default=0)),
                ("tax_amount", models.BigIntegerField(default=0)),
                ("promo_code", models.CharField(blank=True, default="", max_length=32)),
                ("discount_amount", models.BigIntegerField(default=0)),
                (
                    "commission_amount",
                    models.BigIntegerField(
                        default=0,
                        help_text="Platform commission withheld from the chef (subtotal × commission rate).",
                    ),
                ),
                (
                    "chef_earnings_amount",
                    models.BigIntegerField(default=0, help_text="Chef net earnings = subtotal - commission."),
                ),
                ("total_amount", models.BigIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("placed", "Placed"),
                            ("confirmed", "Confirmed"),
                            ("preparing", "Preparing"),
                            ("ready_for_pickup", "Ready for pickup"),
                            ("out_for_delivery", "Out for delivery"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="placed",
                        max_length=32,
                    ),
                ),
                ("placed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("grace_period_seconds", models.PositiveIntegerField(default=300)),
                ("cancellation_deadline", models.DateTimeField(blank=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-placed_at"],
                "indexes": [
                    models.Index(fields=["status"], name="idx_order_status"),
                    models.Index(fields=["placed_at"], name="idx_order_placed_at"),
                    models.Index(
                        fields=["status", "cancellation_deadline"],
                        name="idx_order_status_deadline",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            subtotal_amount=models.F("commission_amount") + models.F("chef_earnings_amount")
                        ),
                        name="chk_order_split_equals_subtotal",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(total_amount__gte=0),
                        name="chk_order_total_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("dish_id", models.CharField(max_length=64)),
                ("dish_name", models.CharField(blank=True, default="", max_length=255)),
                ("unit_price", models.BigIntegerField(help_text="Unit price in paise at placement")),
                ("quantity", models.PositiveIntegerField()),
                ("note", models.CharField(blank=True, default="", max_length=255)),
                ("line_total", models.BigIntegerField()),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="OrderCancellation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("refund_amount", models.BigIntegerField(help_text="Full refund in paise (= committed total)")),
                ("reason", models.TextField(blank=True, default="")),
                ("requested_at", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cancellation",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(refund_amount__gte=0),
                        name="chk_cancellation_refund_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderTip",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "recipient_type",
                    models.CharField(
                        choices=[("chef", "Chef"), ("delivery", "Delivery Partner")],
                        max_length=16,
                    ),
                ),
                ("recipient_id", models.CharField(db_index=True, max_length=64)),
                ("amount", models.BigIntegerField()),
                ("message", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tips",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("order", "recipient_type"),
                        name="uniq_tip_order_recipient_type",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="chk_tip_amount_positive",
                    ),
                ],
            },
        ),
    ]
