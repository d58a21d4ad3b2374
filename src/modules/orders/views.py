"""Order API views.

Exposes the ``OrderService`` and the ``OrderExportReader`` via HTTP using
DRF ViewSets.  Domain exceptions are translated into
``{"detail": ..., "code": ...}`` responses by ``_error_response``; the view
never swallows generic exceptions.
"""

from __future__ import annotations

from uuid import UUID

from django.http import HttpResponse
from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.principals import Principal
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.constants import OrderStatus
from modules.orders.dtos import PlaceOrderItemDTO
from modules.orders.exceptions import (
    CustomerNotFound,
    EmptyOrder,
    Forbidden,
    InsufficientStock,
    InvalidQuantity,
    InvalidTransition,
    OrderNotFound,
    ProductUnavailable,
    Unauthenticated,
)
from modules.orders.exports import OrderExportReader, render_order_csv
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    OrderLineSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderTotalSerializer,
    PlaceOrderSerializer,
    StatusChangeSerializer,
)
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository

# Most specific classes first: EmptyOrder is an InvalidQuantity.
_ERROR_MAP: list[tuple[type[Exception], int, str]] = [
    (Unauthenticated, status.HTTP_401_UNAUTHORIZED, "unauthenticated"),
    (CustomerNotFound, status.HTTP_404_NOT_FOUND, "customer_not_found"),
    (EmptyOrder, status.HTTP_400_BAD_REQUEST, "empty_order"),
    (InvalidQuantity, status.HTTP_400_BAD_REQUEST, "invalid_quantity"),
    (ProductUnavailable, status.HTTP_400_BAD_REQUEST, "product_unavailable"),
    (InsufficientStock, status.HTTP_409_CONFLICT, "insufficient_stock"),
    (OrderNotFound, status.HTTP_404_NOT_FOUND, "order_not_found"),
    (Forbidden, status.HTTP_403_FORBIDDEN, "forbidden"),
    (InvalidTransition, status.HTTP_400_BAD_REQUEST, "invalid_transition"),
]

_DOMAIN_ERRORS = tuple(exc_class for exc_class, _, _ in _ERROR_MAP)


def _error_response(exc: Exception) -> Response:
    for exc_class, http_status, code in _ERROR_MAP:
        if isinstance(exc, exc_class):
            return Response({"detail": str(exc), "code": code}, status=http_status)
    raise exc


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ["placed_at", "total_cents", "status"]
    ordering = ["-placed_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        order_repository = OrderDjangoRepository()
        self._service = OrderService(
            order_repository=order_repository,
            customer_repository=CustomerDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        self._exports = OrderExportReader(order_repository=order_repository)

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_placement"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        return self._service.visible_orders(self._principal())

    def _principal(self) -> Principal:
        return Principal.from_user(self.request.user)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Body: ``{"items": [{"product_id": ..., "quantity": ...}, ...]}``.
        """
        serializer = PlaceOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            items = [
                PlaceOrderItemDTO(product_id=item["product_id"], quantity=item["quantity"])
                for item in serializer.validated_data["items"]
            ]
        except PydanticValidationError as exc:
            return Response(
                {"detail": str(exc), "code": "invalid_quantity"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        principal = self._principal()
        try:
            order_id = self._service.place_order(principal, items)
            order = self._service.get_order(principal, order_id)
        except _DOMAIN_ERRORS as exc:
            return _error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Only orders visible to the caller are listed.  Filtering (status,
        customer, date range, total range) is handled by ``OrderFilter``;
        results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(self._principal(), pk)
        except OrderNotFound as exc:
            return _error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Body: ``{"status": "paid", "notes": "..."}``.
        """
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._change_status(
            pk,
            serializer.validated_data["status"],
            serializer.validated_data["notes"],
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._change_status(
            pk, OrderStatus.CANCELED, serializer.validated_data["notes"]
        )

    def _change_status(self, pk: str | None, next_status: str, notes: str) -> Response:
        principal = self._principal()
        try:
            order = self._service.set_order_status(principal, pk, next_status, notes)
            order = self._service.get_order(principal, order.id)
        except _DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Derived reads
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get"])
    def total(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/total/ (recomputed from the lines)."""
        try:
            order = self._service.get_order(self._principal(), pk)
            total_cents = self._service.compute_order_total(order.id)
        except OrderNotFound as exc:
            return _error_response(exc)
        serializer = OrderTotalSerializer(
            {"order_id": order.id, "total_cents": total_cents}
        )
        return Response(serializer.data)

    @action(detail=True, methods=["get"])
    def lines(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/lines/"""
        try:
            lines = self._exports.list_order_lines(pk, self._principal())
        except OrderNotFound as exc:
            return _error_response(exc)
        serializer = OrderLineSerializer([line.model_dump() for line in lines], many=True)
        return Response(serializer.data)

    @action(detail=True, methods=["get"])
    def export(self, request: Request, pk: str | None = None) -> HttpResponse:
        """GET /api/v1/orders/{pk}/export/ (CSV attachment)."""
        try:
            lines = self._exports.list_order_lines(pk, self._principal())
        except OrderNotFound as exc:
            return _error_response(exc)
        response = HttpResponse(
            render_order_csv(lines), content_type="text/csv; charset=utf-8"
        )
        order_id = UUID(str(pk))
        response["Content-Disposition"] = (
            f'attachment; filename="pedido_{order_id}.csv"'
        )
        return response
