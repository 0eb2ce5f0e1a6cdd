# settlement/api/views.py

"""
======================================================
PATH: settlement/api/views.py
======================================================
EARNINGS API (READ-ONLY)

- GET /api/settlement/ledger/    ledger entries (filter: recipient_type,
                                 recipient_id, from/to YYYY-MM-DD)
- GET /api/settlement/summary/   period summary (daily|weekly|monthly|yearly)

Chefs and delivery partners only ever see their own entries; users with
earnings.view_all may pass any recipient_id.
======================================================
"""

from __future__ import annotations

from datetime import datetime, time, timedelta

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import mixins, status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import error_response
from orders.constants import RECIPIENT_CHEF, RECIPIENT_DELIVERY
from permissions.roles import (
    CAP_EARNINGS_VIEW,
    CAP_EARNINGS_VIEW_ALL,
    ROLE_CHEF,
    ROLE_DELIVERY,
    HasAnyCapability,
    get_user_role,
    user_has_capability,
)
from settlement.models import LedgerEntry
from settlement.serializers import EarningsSummaryQuerySerializer, LedgerEntrySerializer
from settlement.services.exceptions import ReportingError
from settlement.services.reporting import earnings_summary

_ROLE_RECIPIENT_TYPE = {
    ROLE_CHEF: RECIPIENT_CHEF,
    ROLE_DELIVERY: RECIPIENT_DELIVERY,
}


def _parse_date(value: str | None):
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def _local_midnight(d):
    return timezone.make_aware(datetime.combine(d, time.min), timezone.get_current_timezone())


def _can_view_all(request) -> bool:
    return user_has_capability(request, request.user, CAP_EARNINGS_VIEW_ALL)


# ======================================================
# LEDGER
# ======================================================


class LedgerEntryListView(mixins.ListModelMixin, GenericAPIView):
    serializer_class = LedgerEntrySerializer
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_EARNINGS_VIEW, CAP_EARNINGS_VIEW_ALL}
    filterset_fields = ["recipient_type", "recipient_id", "order"]

    def get_queryset(self):
        qs = LedgerEntry.objects.select_related("order", "payout_line")

        if not _can_view_all(self.request):
            qs = qs.filter(recipient_id=str(self.request.user.id))

        date_from = _parse_date(self.request.query_params.get("from"))
        date_to = _parse_date(self.request.query_params.get("to"))
        if date_from:
            qs = qs.filter(earned_at__gte=_local_midnight(date_from))
        if date_to:
            qs = qs.filter(earned_at__lt=_local_midnight(date_to) + timedelta(days=1))

        return qs.order_by("-earned_at", "-id")

    @extend_schema(
        parameters=[
            OpenApiParameter(name="from", type=OpenApiTypes.DATE, required=False),
            OpenApiParameter(name="to", type=OpenApiTypes.DATE, required=False),
        ],
        responses={200: LedgerEntrySerializer(many=True)},
    )
    def get(self, request, *args, **kwargs):
        for key in ("from", "to"):
            raw = request.query_params.get(key)
            if raw and _parse_date(raw) is None:
                return error_response(
                    code="INVALID_DATE",
                    message=f"Invalid '{key}' date. Use YYYY-MM-DD.",
                    http_status=status.HTTP_400_BAD_REQUEST,
                )
        return self.list(request, *args, **kwargs)


# ======================================================
# SUMMARY
# ======================================================


class EarningsSummaryView(APIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_EARNINGS_VIEW, CAP_EARNINGS_VIEW_ALL}

    @extend_schema(
        parameters=[EarningsSummaryQuerySerializer],
        description="Earnings summary for one chef or delivery partner over a period.",
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        query = EarningsSummaryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        recipient_type = params.get("recipient_type") or _ROLE_RECIPIENT_TYPE.get(
            get_user_role(request.user)
        )
        if not recipient_type:
            return error_response(
                code="RECIPIENT_TYPE_REQUIRED",
                message="recipient_type is required.",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        recipient_id = str(request.user.id)
        if _can_view_all(request):
            recipient_id = params.get("recipient_id") or recipient_id
        elif params.get("recipient_id") and params["recipient_id"] != recipient_id:
            return error_response(
                code="FORBIDDEN",
                message="You can only view your own earnings.",
                http_status=status.HTTP_403_FORBIDDEN,
            )

        try:
            summary = earnings_summary(
                recipient_id=recipient_id,
                recipient_type=recipient_type,
                period=params["period"],
                expenses=params["expenses"],
            )
        except ReportingError as exc:
            return error_response(
                code="REPORTING_ERROR",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(summary.as_dict(), status=status.HTTP_200_OK)
