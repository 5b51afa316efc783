"""Every error kind maps to one HTTP status with an ``{"error": ...}`` body."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from modules.core.exceptions import (
    AlreadyExistsError,
    ErrorKind,
    ForbiddenError,
    InternalError,
    InvalidInputError,
    NotFoundError,
)
from modules.orders.exceptions import InsufficientStock
from modules.orders.views import ERROR_STATUS

pytestmark = pytest.mark.integration


def test_every_error_kind_is_mapped():
    assert set(ERROR_STATUS) == set(ErrorKind)


@pytest.mark.parametrize(
    "error,expected_status",
    [
        (NotFoundError("order not found"), 404),
        (InvalidInputError("bad"), 400),
        (InsufficientStock(), 409),
        (AlreadyExistsError(), 409),
        (ForbiddenError(), 403),
        (InternalError(), 500),
    ],
)
def test_domain_errors_are_translated(auth_client, error, expected_status):
    with patch(
        "modules.orders.services.OrderService.list_user_orders", side_effect=error
    ):
        response = auth_client.get("/api/v1/orders/")

    assert response.status_code == expected_status
    assert response.json() == {"error": error.detail}


def test_unexpected_exceptions_are_not_swallowed(auth_client):
    with patch(
        "modules.orders.services.OrderService.list_user_orders",
        side_effect=RuntimeError("bug"),
    ):
        with pytest.raises(RuntimeError):
            auth_client.get("/api/v1/orders/")
