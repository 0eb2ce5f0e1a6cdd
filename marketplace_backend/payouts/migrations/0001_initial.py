"""
PATH: payouts/migrations/0001_initial.py

MIGRATION: CREATE PayoutSchedule, PayoutAccount, PayoutRecord, PayoutLine
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
from django.db import migrations, models

RECIPIENT_TYPE_CHOICES = [("chef", "Chef"), ("delivery", "Delivery Partner")]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("settlement", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PayoutSchedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("recipient_type", models.CharField(choices=RECIPIENT_TYPE_CHOICES, max_length=16)),
                (
                    "frequency",
                    models.CharField(
                        choices=[
                            ("weekly", "Weekly"),
                            ("bi-weekly", "Every two weeks"),
                            ("monthly", "Monthly"),
                        ],
                        max_length=16,
                    ),
                ),
                ("anchor_day", models.PositiveSmallIntegerField()),
                (
                    "minimum_amount",
                    models.BigIntegerField(help_text="Minimum gross earnings (paise) to issue a payout"),
                ),
                (
                    "processing_fee",
                    models.BigIntegerField(help_text="Flat fee (paise) charged once per payout record"),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("version", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["recipient_type", "-version"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("recipient_type", "version"),
                        name="uniq_payout_schedule_type_version",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(processing_fee__gte=0),
                        name="chk_payout_schedule_fee_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(minimum_amount__gte=models.F("processing_fee")),
                        name="chk_payout_schedule_minimum_covers_fee",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PayoutAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("recipient_type", models.CharField(choices=RECIPIENT_TYPE_CHOICES, max_length=16)),
                ("recipient_id", models.CharField(max_length=64)),
                ("bank_name", models.CharField(max_length=128)),
                ("account_holder_name", models.CharField(max_length=128)),
                (
                    "account_number_masked",
                    models.CharField(help_text="e.g. ****4567", max_length=32),
                ),
                ("ifsc_code", models.CharField(max_length=11)),
                ("is_verified", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("recipient_type", "recipient_id"),
                        name="uniq_payout_account_recipient",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PayoutRecord",
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
                ("recipient_type", models.CharField(choices=RECIPIENT_TYPE_CHOICES, max_length=16)),
                ("recipient_id", models.CharField(max_length=64)),
                ("period_start", models.DateTimeField()),
                ("period_end", models.DateTimeField()),
                ("gross_earnings", models.BigIntegerField()),
                ("platform_fee_already_deducted", models.BigIntegerField(default=0)),
                ("processing_fee", models.BigIntegerField()),
                ("net_amount", models.BigIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("due_date", models.DateTimeField()),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("failed_at", models.DateTimeField(blank=True, null=True)),
                ("failure_reason", models.TextField(blank=True, default="")),
                ("provider_reference", models.CharField(blank=True, default="", max_length=128)),
                ("retry_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "schedule",
                    models.ForeignKey(
                        help_text="Exact schedule version used to generate this record",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payout_records",
                        to="payouts.payoutschedule",
                    ),
                ),
            ],
            options={
                "ordering": ["-period_end", "recipient_id"],
                "indexes": [
                    models.Index(fields=["recipient_type", "status"], name="idx_payout_type_status"),
                    models.Index(fields=["status", "due_date"], name="idx_payout_status_due"),
                    models.Index(fields=["recipient_type", "recipient_id"], name="idx_payout_recipient"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("recipient_type", "recipient_id", "period_start", "period_end"),
                        name="uniq_payout_recipient_period",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            net_amount=models.F("gross_earnings") - models.F("processing_fee")
                        ),
                        name="chk_payout_net_equals_gross_minus_fee",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(period_end__gt=models.F("period_start")),
                        name="chk_payout_period_end_after_start",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(net_amount__gte=0),
                        name="chk_payout_net_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PayoutLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.BigIntegerField(help_text="Copied from the ledger entry (paise)")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "ledger_entry",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payout_line",
                        to="settlement.ledgerentry",
                    ),
                ),
                (
                    "payout",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lines",
                        to="payouts.payoutrecord",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
    ]
