"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are translated by ``ErrorKind`` into HTTP status
codes; the view never swallows generic exceptions.
"""

from __future__ import annotations

from datetime import datetime, time

import structlog
from django.apps import apps
from django.utils import timezone
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import DomainError, ErrorKind, InvalidInputError
from modules.core.identity import Caller
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, ExportFilterDTO
from modules.orders.exports import orders_csv_response
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    ExportQuerySerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatsSerializer,
    StatsQuerySerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import OrderService
from modules.orders.unit_of_work import DjangoUnitOfWork

logger = structlog.get_logger(__name__)

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ADMIN_ACTIONS = {"update", "partial_update", "destroy", "stats", "export", "export_csv"}


def _bad_request(errors) -> Response:
    return Response({"error": errors}, status=status.HTTP_400_BAD_REQUEST)


def _parse_pk(pk: str | None) -> int:
    try:
        return int(pk)
    except (TypeError, ValueError):
        raise InvalidInputError("invalid order id") from None


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            unit_of_work_factory=DjangoUnitOfWork,
            config=apps.get_app_config("orders").pipeline_config,
        )

    def get_permissions(self):
        if self.action in ADMIN_ACTIONS:
            return [IsAuthenticated(), IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttle scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, DomainError):
            code = ERROR_STATUS[exc.kind]
            if exc.kind is ErrorKind.INTERNAL:
                logger.error(
                    "order.request_failed", error=exc.detail, action=self.action
                )
            else:
                logger.info(
                    "order.request_rejected",
                    kind=exc.kind.value,
                    error=exc.detail,
                    action=self.action,
                )
            return Response({"error": exc.detail}, status=code)
        return super().handle_exception(exc)

    def _caller(self, request: Request) -> Caller:
        return Caller.from_user(request.user)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer.errors)

        data = serializer.validated_data
        try:
            dto = CreateOrderDTO(
                user_id=request.user.pk,
                items=[
                    CreateOrderItemDTO(
                        product_id=item["product_id"],
                        quantity=item["quantity"],
                        price=item["price"],
                    )
                    for item in data["items"]
                ],
                pickup_point=data["pickup_point"],
                delivery_date=data.get("delivery_date"),
            )
        except (PydanticValidationError, ValueError) as exc:
            return _bad_request(str(exc))

        order_id = self._service.create_order(dto)
        return Response({"order_id": order_id}, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/ (the caller's own orders)."""
        orders = self._service.list_user_orders(request.user.pk)
        return Response(OrderSerializer(orders, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order(_parse_pk(pk), self._caller(request))
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Status Update / Delete (admin)
    # ------------------------------------------------------------------

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/orders/{pk}/"""
        order_id = _parse_pk(pk)
        serializer = UpdateOrderStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer.errors)

        self._service.admin_update_status(
            order_id,
            serializer.validated_data["status"],
            self._caller(request),
        )
        return Response({"message": "status updated"})

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/"""
        self._service.delete_order(_parse_pk(pk), self._caller(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Cancel (dedicated action)
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        self._service.cancel_order(_parse_pk(pk), self._caller(request))
        return Response({"message": "order cancelled"})

    # ------------------------------------------------------------------
    # Reporting (admin)
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        """GET /api/v1/orders/stats/?from=YYYY-MM-DD&to=YYYY-MM-DD"""
        serializer = StatsQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return _bad_request(serializer.errors)

        day_from = serializer.validated_data.get("from")
        day_to = serializer.validated_data.get("to")
        date_from = (
            timezone.make_aware(datetime.combine(day_from, time.min))
            if day_from
            else None
        )
        # The ``to`` day is included in full.
        date_to = (
            timezone.make_aware(datetime.combine(day_to, time.max)) if day_to else None
        )

        stats = self._service.get_stats(date_from, date_to)
        return Response(
            {
                "status": "OK",
                "data": OrderStatsSerializer(
                    [s.model_dump(mode="json") for s in stats], many=True
                ).data,
            }
        )

    def _export_filter(self, request: Request) -> ExportFilterDTO | Response:
        serializer = ExportQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return _bad_request(serializer.errors)
        return ExportFilterDTO(**serializer.validated_data)

    @action(detail=False, methods=["get"])
    def export(self, request: Request) -> Response:
        """GET /api/v1/orders/export/"""
        filters = self._export_filter(request)
        if isinstance(filters, Response):
            return filters
        orders = self._service.export_orders(filters)
        return Response({"orders": OrderListSerializer(orders, many=True).data})

    @action(detail=False, methods=["get"], url_path="export/csv")
    def export_csv(self, request: Request):
        """GET /api/v1/orders/export/csv/"""
        filters = self._export_filter(request)
        if isinstance(filters, Response):
            return filters
        return orders_csv_response(self._service.export_orders(filters))
