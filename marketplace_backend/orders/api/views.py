# orders/api/views.py

"""
======================================================
PATH: orders/api/views.py
======================================================
ORDERS API

Endpoints:
- POST /api/orders/quote/                 breakdown for display (no side effects)
- POST /api/orders/                       place order
- GET  /api/orders/ , /api/orders/<id>/   read (own orders unless orders.view_all)
- POST /api/orders/<id>/cancel/           cancel inside the window
- POST /api/orders/<id>/advance/          forward status change
- POST /api/orders/<id>/assign-delivery/  set delivery partner
- POST /api/orders/<id>/tips/             tip chef / delivery partner

Security:
- IsAuthenticated + action-specific capability (permissions.roles)
- Non-admin users only ever see orders they take part in; other orders
  answer ORDER_NOT_FOUND

Errors use the canonical envelope (backend.errors.error_response).
======================================================
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db.models import Q
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import error_response
from orders.models import Order
from orders.serializers import (
    AdvanceCommandSerializer,
    AssignDeliveryCommandSerializer,
    BreakdownSerializer,
    CancelCommandSerializer,
    CancellationResultSerializer,
    OrderSerializer,
    OrderTipSerializer,
    PlaceOrderInputSerializer,
    QuoteInputSerializer,
    TipCommandSerializer,
)
from orders.serializers.commands import cart_from_data
from orders.services.breakdown import compute_breakdown
from orders.services.exceptions import (
    CancellationWindowExpired,
    DeliveryAssignmentError,
    DeliveryPartnerRequiredError,
    DuplicateTipError,
    InvalidOrderTransitionError,
    OrderError,
    OrderNotFoundError,
    OrderPlacementError,
    TipError,
)
from orders.services.order_service import (
    MinimumOrderNotMetError,
    advance_order,
    assign_delivery_partner,
    cancel_order,
    place_order,
)
from orders.services.tip_service import add_tip
from permissions.roles import (
    CAP_ORDERS_ADVANCE,
    CAP_ORDERS_ASSIGN_DELIVERY,
    CAP_ORDERS_CANCEL,
    CAP_ORDERS_PLACE,
    CAP_ORDERS_TIP,
    CAP_ORDERS_VIEW,
    CAP_ORDERS_VIEW_ALL,
    HasCapability,
    user_has_capability,
)


# ======================================================
# API ERROR NORMALIZATION
# ======================================================


def order_error_response(exc: OrderError) -> Response:
    if isinstance(exc, OrderNotFoundError):
        return error_response(
            code="ORDER_NOT_FOUND",
            message="Order not found.",
            http_status=status.HTTP_404_NOT_FOUND,
        )

    if isinstance(exc, CancellationWindowExpired):
        return error_response(
            code="CANCELLATION_WINDOW_EXPIRED",
            message="This order can no longer be cancelled. Please contact support.",
            http_status=status.HTTP_409_CONFLICT,
            current_status=exc.current_status,
            deadline=exc.deadline.isoformat(),
            attempted_at=exc.attempted_at.isoformat(),
        )

    if isinstance(exc, InvalidOrderTransitionError):
        return error_response(
            code="INVALID_TRANSITION",
            message=str(exc),
            http_status=status.HTTP_409_CONFLICT,
            current_status=exc.current_status,
            target_status=exc.target_status,
        )

    if isinstance(exc, MinimumOrderNotMetError):
        return error_response(
            code="MINIMUM_ORDER_NOT_MET",
            message=str(exc),
            http_status=status.HTTP_400_BAD_REQUEST,
            subtotal=exc.subtotal,
            minimum=exc.minimum,
        )

    if isinstance(exc, OrderPlacementError):
        return error_response(
            code="ORDER_PLACEMENT_FAILED",
            message=str(exc),
            http_status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, DeliveryPartnerRequiredError):
        return error_response(
            code="DELIVERY_PARTNER_REQUIRED",
            message=str(exc),
            http_status=status.HTTP_409_CONFLICT,
            current_status=exc.current_status,
            target_status=exc.target_status,
        )

    if isinstance(exc, DeliveryAssignmentError):
        return error_response(
            code="DELIVERY_ASSIGNMENT_FAILED",
            message=str(exc),
            http_status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, DuplicateTipError):
        return error_response(
            code="TIP_ALREADY_EXISTS",
            message=str(exc),
            http_status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, TipError):
        return error_response(
            code="TIP_REJECTED",
            message=str(exc),
            http_status=status.HTTP_400_BAD_REQUEST,
        )

    return error_response(
        code="ORDER_ERROR",
        message=str(exc),
        http_status=status.HTTP_400_BAD_REQUEST,
    )


# ======================================================
# QUOTE
# ======================================================


class QuoteView(APIView):
    """
    Compute the financial breakdown for a cart without placing anything.
    Unknown promo codes are reported (promo_applied=false), never rejected.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(request=QuoteInputSerializer, responses={200: BreakdownSerializer})
    def post(self, request):
        serializer = QuoteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = cart_from_data(serializer.validated_data["cart"])
        breakdown = compute_breakdown(cart, serializer.validated_data.get("promo_code"))
        return Response(BreakdownSerializer(breakdown.as_dict()).data, status=status.HTTP_200_OK)


# ======================================================
# ORDER VIEWSET
# ======================================================


class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "chef_id", "customer_id", "delivery_partner_id"]

    # Capability hook used by HasCapability
    required_capability = None

    _ACTION_CAPABILITIES = {
        "create": CAP_ORDERS_PLACE,
        "cancel": CAP_ORDERS_CANCEL,
        "advance": CAP_ORDERS_ADVANCE,
        "assign_delivery": CAP_ORDERS_ASSIGN_DELIVERY,
        "tips": CAP_ORDERS_TIP,
    }

    def get_permissions(self):
        self.required_capability = self._ACTION_CAPABILITIES.get(self.action, CAP_ORDERS_VIEW)
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = Order.objects.all().prefetch_related("items", "tips").select_related("cancellation")

        user = self.request.user
        if not user_has_capability(self.request, user, CAP_ORDERS_VIEW_ALL):
            uid = str(user.id)
            qs = qs.filter(Q(customer_id=uid) | Q(chef_id=uid) | Q(delivery_partner_id=uid))

        return qs.order_by("-placed_at")

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["now"] = timezone.now()
        return context

    def _scoped_order_id(self, pk):
        """
        Resolve pk within the caller's visible orders.
        Raises OrderNotFoundError for unknown ids and for other users' orders.
        """
        try:
            found = self.get_queryset().filter(pk=pk).exists()
        except (ValidationError, ValueError, TypeError) as exc:
            # malformed uuid
            raise OrderNotFoundError(pk) from exc
        if not found:
            raise OrderNotFoundError(pk)
        return pk

    def _order_response(self, order_id, http_status=status.HTTP_200_OK) -> Response:
        order = self.get_queryset().get(pk=order_id)
        return Response(self.get_serializer(order).data, status=http_status)

    def retrieve(self, request, pk=None):
        try:
            order_id = self._scoped_order_id(pk)
        except OrderError as exc:
            return order_error_response(exc)
        return self._order_response(order_id)

    # --------------------------------------------------
    # PLACE
    # --------------------------------------------------

    @extend_schema(request=PlaceOrderInputSerializer, responses={201: OrderSerializer})
    def create(self, request):
        serializer = PlaceOrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        cart = cart_from_data(data["cart"])
        breakdown = compute_breakdown(cart, data.get("promo_code"))

        try:
            order = place_order(
                cart=cart,
                breakdown=breakdown,
                delivery_address=data["delivery_address"],
                customer_id=str(request.user.id),
            )
        except OrderError as exc:
            return order_error_response(exc)

        return self._order_response(order.id, http_status=status.HTTP_201_CREATED)

    # --------------------------------------------------
    # CANCEL
    # --------------------------------------------------

    @extend_schema(request=CancelCommandSerializer, responses={200: CancellationResultSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        command = CancelCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            order_id = self._scoped_order_id(pk)
            result = cancel_order(
                order_id=order_id,
                reason=command.validated_data.get("reason", ""),
            )
        except OrderError as exc:
            return order_error_response(exc)

        return Response(CancellationResultSerializer(result).data, status=status.HTTP_200_OK)

    # --------------------------------------------------
    # ADVANCE
    # --------------------------------------------------

    @extend_schema(request=AdvanceCommandSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="advance")
    def advance(self, request, pk=None):
        command = AdvanceCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            order_id = self._scoped_order_id(pk)
            order = advance_order(order_id=order_id, target_status=command.validated_data["status"])
        except OrderError as exc:
            return order_error_response(exc)

        return self._order_response(order.id)

    # --------------------------------------------------
    # DELIVERY ASSIGNMENT
    # --------------------------------------------------

    @extend_schema(request=AssignDeliveryCommandSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="assign-delivery")
    def assign_delivery(self, request, pk=None):
        command = AssignDeliveryCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            order_id = self._scoped_order_id(pk)
            order = assign_delivery_partner(
                order_id=order_id,
                partner_id=command.validated_data["partner_id"],
            )
        except OrderError as exc:
            return order_error_response(exc)

        return self._order_response(order.id)

    # --------------------------------------------------
    # TIPS
    # --------------------------------------------------

    @extend_schema(request=TipCommandSerializer, responses={201: OrderTipSerializer})
    @action(detail=True, methods=["post"], url_path="tips")
    def tips(self, request, pk=None):
        command = TipCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        try:
            order_id = self._scoped_order_id(pk)
            tip = add_tip(
                order_id=order_id,
                recipient_type=data["recipient_type"],
                amount=data["amount"],
                message=data.get("message", ""),
            )
        except OrderError as exc:
            return order_error_response(exc)

        return Response(OrderTipSerializer(tip).data, status=status.HTTP_201_CREATED)
