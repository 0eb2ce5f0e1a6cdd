# payouts/api/views.py

"""
======================================================
PATH: payouts/api/views.py
======================================================
PAYOUTS API

Read:
- GET  /api/payouts/ , /api/payouts/<id>/   (own records unless payouts.manage)

Admin (payouts.manage):
- POST /api/payouts/generate/               batch for one recipient type
- POST /api/payouts/process-bulk/           hand every pending record to the rail
- POST /api/payouts/<id>/process/           pending -> processing
- POST /api/payouts/<id>/complete/          rail callback
- POST /api/payouts/<id>/fail/              rail callback
- POST /api/payouts/<id>/retry/             failed -> pending
======================================================
"""

from __future__ import annotations

from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import error_response
from payouts.models import PayoutRecord
from payouts.serializers import (
    CompletePayoutCommandSerializer,
    FailPayoutCommandSerializer,
    GenerateBatchCommandSerializer,
    PayoutProcessResultSerializer,
    PayoutRecordSerializer,
    ProcessBulkCommandSerializer,
)
from payouts.services.batch_engine import generate_batch, process_bulk, process_individual
from payouts.services.exceptions import (
    InvalidPayoutTransitionError,
    PayoutError,
    PayoutNotFoundError,
    PayoutScheduleNotFoundError,
)
from payouts.services.payout_lifecycle import complete_payout, fail_payout, retry_payout
from payouts.services.schedules import active_schedule_for
from permissions.roles import (
    CAP_PAYOUTS_MANAGE,
    CAP_PAYOUTS_VIEW,
    HasCapability,
    user_has_capability,
)

_ERROR_STATUS = {
    PayoutNotFoundError: status.HTTP_404_NOT_FOUND,
    PayoutScheduleNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidPayoutTransitionError: status.HTTP_409_CONFLICT,
}


def payout_error_response(exc: PayoutError) -> Response:
    http_status = status.HTTP_400_BAD_REQUEST
    for exc_type, mapped in _ERROR_STATUS.items():
        if isinstance(exc, exc_type):
            http_status = mapped
            break

    context = {}
    if isinstance(exc, InvalidPayoutTransitionError):
        context = {"current_status": exc.current_status, "target_status": exc.target_status}

    return error_response(code=exc.code, message=str(exc), http_status=http_status, **context)


# ======================================================
# PAYOUT RECORDS
# ======================================================


class PayoutRecordViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = PayoutRecordSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["recipient_type", "recipient_id", "status"]

    required_capability = None

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            self.required_capability = CAP_PAYOUTS_VIEW
        else:
            self.required_capability = CAP_PAYOUTS_MANAGE
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = PayoutRecord.objects.select_related("schedule").prefetch_related("lines__ledger_entry")

        if not user_has_capability(self.request, self.request.user, CAP_PAYOUTS_MANAGE):
            qs = qs.filter(recipient_id=str(self.request.user.id))

        return qs.order_by("-period_end", "recipient_id")

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["now"] = timezone.now()
        return context

    def _record_response(self, payout) -> Response:
        payout = self.get_queryset().get(pk=payout.pk)
        return Response(self.get_serializer(payout).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: PayoutProcessResultSerializer})
    @action(detail=True, methods=["post"], url_path="process")
    def process(self, request, pk=None):
        try:
            result = process_individual(payout_id=pk)
        except PayoutError as exc:
            return payout_error_response(exc)
        return Response(PayoutProcessResultSerializer(result.as_dict()).data, status=status.HTTP_200_OK)

    @extend_schema(request=CompletePayoutCommandSerializer, responses={200: PayoutRecordSerializer})
    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, pk=None):
        command = CompletePayoutCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            payout = complete_payout(
                payout_id=pk,
                provider_reference=command.validated_data["provider_reference"],
            )
        except PayoutError as exc:
            return payout_error_response(exc)
        return self._record_response(payout)

    @extend_schema(request=FailPayoutCommandSerializer, responses={200: PayoutRecordSerializer})
    @action(detail=True, methods=["post"], url_path="fail")
    def fail(self, request, pk=None):
        command = FailPayoutCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            payout = fail_payout(payout_id=pk, reason=command.validated_data["reason"])
        except PayoutError as exc:
            return payout_error_response(exc)
        return self._record_response(payout)

    @extend_schema(request=None, responses={200: PayoutRecordSerializer})
    @action(detail=True, methods=["post"], url_path="retry")
    def retry(self, request, pk=None):
        try:
            payout = retry_payout(payout_id=pk)
        except PayoutError as exc:
            return payout_error_response(exc)
        return self._record_response(payout)


# ======================================================
# BATCH OPERATIONS
# ======================================================


class GenerateBatchView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PAYOUTS_MANAGE

    @extend_schema(request=GenerateBatchCommandSerializer, responses={201: PayoutRecordSerializer(many=True)})
    def post(self, request):
        command = GenerateBatchCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        try:
            schedule = active_schedule_for(data["recipient_type"])
            records = generate_batch(
                recipient_type=data["recipient_type"],
                schedule=schedule,
                as_of=data.get("as_of"),
            )
        except PayoutError as exc:
            return payout_error_response(exc)

        serializer = PayoutRecordSerializer(records, many=True, context={"now": timezone.now()})
        return Response(
            {"count": len(records), "results": serializer.data},
            status=status.HTTP_201_CREATED,
        )


class ProcessBulkView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PAYOUTS_MANAGE

    @extend_schema(request=ProcessBulkCommandSerializer, responses={200: PayoutProcessResultSerializer(many=True)})
    def post(self, request):
        command = ProcessBulkCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        results = process_bulk(recipient_type=command.validated_data["recipient_type"])
        return Response(
            {
                "processed": sum(1 for r in results if r.changed),
                "failed": sum(1 for r in results if not r.ok),
                "results": [r.as_dict() for r in results],
            },
            status=status.HTTP_200_OK,
        )
