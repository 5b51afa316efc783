"""Integration tests for status changes, cancellation and deletion.

- PUT/PATCH /api/v1/orders/{id}/ (admin)
- POST /api/v1/orders/{id}/cancel/ (owner or admin)
- DELETE /api/v1/orders/{id}/ (admin)
"""

from __future__ import annotations

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem
from modules.products.models import Product

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


@pytest.fixture()
def order(user, product_a, make_order):
    return make_order(user.pk, [(product_a, 2, 1000)])


def _status(order) -> str:
    return Order.objects.get(pk=order.pk).status


def _stock(product) -> int:
    return Product.objects.get(pk=product.pk).stock_quantity


def _create(client, product, quantity) -> int:
    response = client.post(
        URL,
        {
            "items": [
                {"product_id": product.pk, "quantity": quantity, "price": 1000}
            ],
            "pickup_point": "Store",
        },
        format="json",
    )
    assert response.status_code == 201
    return response.json()["order_id"]


class TestAdminStatusUpdateApi:
    def test_patch_sets_status(self, admin_client, order):
        response = admin_client.patch(
            f"{URL}{order.pk}/", {"status": "shipped"}, format="json"
        )

        assert response.status_code == 200
        assert response.json() == {"message": "status updated"}
        assert _status(order) == OrderStatus.SHIPPED

    def test_put_sets_status(self, admin_client, order):
        response = admin_client.put(
            f"{URL}{order.pk}/", {"status": "paid"}, format="json"
        )
        assert response.status_code == 200
        assert _status(order) == OrderStatus.PAID

    def test_backward_move_allowed_by_default(
        self, admin_client, user, product_a, make_order
    ):
        delivered = make_order(
            user.pk, [(product_a, 1, 1000)], status=OrderStatus.DELIVERED
        )
        response = admin_client.patch(
            f"{URL}{delivered.pk}/", {"status": "pending_payment"}, format="json"
        )
        assert response.status_code == 200
        assert _status(delivered) == OrderStatus.PENDING_PAYMENT

    def test_unknown_status_is_400(self, admin_client, order):
        response = admin_client.patch(
            f"{URL}{order.pk}/", {"status": "lost"}, format="json"
        )
        assert response.status_code == 400
        assert response.json() == {"error": "invalid status"}
        assert _status(order) == OrderStatus.PENDING_PAYMENT

    def test_missing_status_field_is_400(self, admin_client, order):
        response = admin_client.patch(f"{URL}{order.pk}/", {}, format="json")
        assert response.status_code == 400

    def test_missing_order_is_404(self, admin_client):
        response = admin_client.patch(
            f"{URL}999999/", {"status": "paid"}, format="json"
        )
        assert response.status_code == 404

    def test_regular_user_is_403(self, auth_client, order):
        response = auth_client.patch(
            f"{URL}{order.pk}/", {"status": "paid"}, format="json"
        )
        assert response.status_code == 403
        assert _status(order) == OrderStatus.PENDING_PAYMENT

    def test_admin_cancel_returns_stock(self, admin_client, auth_client, product_a):
        order_id = _create(auth_client, product_a, 4)
        assert _stock(product_a) == 96

        response = admin_client.patch(
            f"{URL}{order_id}/", {"status": "cancelled"}, format="json"
        )

        assert response.status_code == 200
        assert _stock(product_a) == 100

    def test_reopening_without_stock_is_409(
        self, admin_client, auth_client, other_client, low_stock_product
    ):
        order_id = _create(auth_client, low_stock_product, 2)
        assert auth_client.post(f"{URL}{order_id}/cancel/").status_code == 200
        _create(other_client, low_stock_product, 2)

        response = admin_client.patch(
            f"{URL}{order_id}/", {"status": "pending_payment"}, format="json"
        )

        assert response.status_code == 409
        assert response.json() == {"error": "insufficient stock"}
        assert Order.objects.get(pk=order_id).status == OrderStatus.CANCELLED
        assert _stock(low_stock_product) == 0


class TestCancelApi:
    def test_owner_cancels(self, auth_client, order):
        response = auth_client.post(f"{URL}{order.pk}/cancel/")

        assert response.status_code == 200
        assert response.json() == {"message": "order cancelled"}
        assert _status(order) == OrderStatus.CANCELLED

    def test_cancel_after_create_restores_stock(self, auth_client, product_a):
        created = auth_client.post(
            URL,
            {
                "items": [{"product_id": product_a.pk, "quantity": 5, "price": 1000}],
                "pickup_point": "Store",
            },
            format="json",
        )
        order_id = created.json()["order_id"]
        assert Product.objects.get(pk=product_a.pk).stock_quantity == 95

        response = auth_client.post(f"{URL}{order_id}/cancel/")

        assert response.status_code == 200
        assert Product.objects.get(pk=product_a.pk).stock_quantity == 100

    def test_admin_cancels_any(self, admin_client, order):
        assert admin_client.post(f"{URL}{order.pk}/cancel/").status_code == 200
        assert _status(order) == OrderStatus.CANCELLED

    def test_paid_order_cannot_be_cancelled(
        self, auth_client, user, product_a, make_order
    ):
        paid = make_order(user.pk, [(product_a, 1, 1000)], status=OrderStatus.PAID)

        response = auth_client.post(f"{URL}{paid.pk}/cancel/")

        assert response.status_code == 400
        assert response.json() == {"error": "cancel not allowed"}
        assert _status(paid) == OrderStatus.PAID

    def test_other_user_gets_404(self, other_client, order):
        response = other_client.post(f"{URL}{order.pk}/cancel/")
        assert response.status_code == 404
        assert _status(order) == OrderStatus.PENDING_PAYMENT

    def test_non_numeric_id_is_400(self, auth_client):
        assert auth_client.post(f"{URL}abc/cancel/").status_code == 400


class TestDeleteApi:
    def test_admin_deletes(self, admin_client, order):
        response = admin_client.delete(f"{URL}{order.pk}/")

        assert response.status_code == 204
        assert not Order.objects.filter(pk=order.pk).exists()
        assert not OrderItem.objects.filter(order_id=order.pk).exists()

    def test_missing_is_404(self, admin_client):
        assert admin_client.delete(f"{URL}999999/").status_code == 404

    def test_regular_user_is_403(self, auth_client, order):
        assert auth_client.delete(f"{URL}{order.pk}/").status_code == 403
        assert Order.objects.filter(pk=order.pk).exists()

    def test_second_delete_is_404(self, admin_client, order):
        assert admin_client.delete(f"{URL}{order.pk}/").status_code == 204

        response = admin_client.delete(f"{URL}{order.pk}/")

        assert response.status_code == 404
        assert response.json() == {"error": "order not found"}

    def test_deleting_unpaid_order_returns_stock(
        self, admin_client, auth_client, product_a
    ):
        order_id = _create(auth_client, product_a, 4)
        assert _stock(product_a) == 96

        assert admin_client.delete(f"{URL}{order_id}/").status_code == 204
        assert _stock(product_a) == 100
