"""CSV rendering of exported orders."""

from __future__ import annotations

import csv
from datetime import datetime
from typing import IO, Iterable, Optional

from django.http import HttpResponse
from django.utils import timezone

from modules.orders.models import Order

CSV_HEADER = [
    "ID",
    "UserID",
    "Status",
    "DeliveryDate",
    "PickupPoint",
    "OrderDate",
    "TotalAmount",
    "ReceiptURL",
    "CreatedAt",
    "UpdatedAt",
]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.strftime(TIMESTAMP_FORMAT)


def write_orders_csv(orders: Iterable[Order], stream: IO[str]) -> None:
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)
    for order in orders:
        writer.writerow(
            [
                order.pk,
                order.user_id,
                order.status,
                format_timestamp(order.delivery_date),
                order.pickup_point,
                format_timestamp(order.order_date),
                order.total_amount,
                order.receipt_url or "",
                format_timestamp(order.created_at),
                format_timestamp(order.updated_at),
            ]
        )


def orders_csv_response(
    orders: Iterable[Order], filename: str = "orders.csv"
) -> HttpResponse:
    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    write_orders_csv(orders, response)
    return response
