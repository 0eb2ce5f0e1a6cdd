"""
PATH: settlement/migrations/0001_initial.py

MIGRATION: CREATE LedgerEntry (append-only earnings ledger)
"""

from __future__ import annotations

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "recipient_type",
                    models.CharField(
                        choices=[("chef", "Chef"), ("delivery", "Delivery Partner")],
                        max_length=16,
                    ),
                ),
                ("recipient_id", models.CharField(max_length=64)),
                ("amount", models.BigIntegerField(help_text="Earned amount in paise")),
                (
                    "platform_fee",
                    models.BigIntegerField(
                        default=0,
                        help_text="Commission already withheld at settlement (paise, informational)",
                    ),
                ),
                ("earned_at", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["earned_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["recipient_type", "recipient_id", "earned_at"],
                        name="idx_ledger_recipient_earned",
                    ),
                    models.Index(fields=["recipient_type", "earned_at"], name="idx_ledger_type_earned"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("order", "recipient_type"),
                        name="uniq_ledger_order_recipient_type",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(amount__gte=0),
                        name="chk_ledger_amount_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(platform_fee__gte=0),
                        name="chk_ledger_platform_fee_non_negative",
                    ),
                ],
            },
        ),
    ]
