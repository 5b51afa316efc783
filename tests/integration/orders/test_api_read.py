"""Integration tests for GET /api/v1/orders/ and /api/v1/orders/{id}/."""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone

import pytest

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


class TestListOrdersApi:
    def test_lists_only_callers_orders_most_recent_first(
        self, auth_client, user, other_user, product_a, make_order
    ):
        older = make_order(
            user.pk,
            [(product_a, 1, 1000)],
            order_date=datetime(2026, 1, 1, tzinfo=dt_timezone.utc),
        )
        newer = make_order(
            user.pk,
            [(product_a, 2, 1000)],
            order_date=datetime(2026, 2, 1, tzinfo=dt_timezone.utc),
        )
        make_order(other_user.pk, [(product_a, 1, 1000)])

        response = auth_client.get(URL)

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [newer.pk, older.pk]

    def test_empty(self, auth_client):
        response = auth_client.get(URL)
        assert response.status_code == 200
        assert response.json() == []

    def test_requires_authentication(self, api_client):
        assert api_client.get(URL).status_code == 401

    def test_export_filters_do_not_apply_to_listing(
        self, auth_client, user, other_user, product_a, make_order
    ):
        own = make_order(user.pk, [(product_a, 1, 1000)])
        make_order(other_user.pk, [(product_a, 1, 1000)], status="paid")

        response = auth_client.get(URL, {"user_id": other_user.pk, "status": "paid"})

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [own.pk]


class TestRetrieveOrderApi:
    def test_owner_sees_order_with_items(
        self, auth_client, user, product_a, make_order
    ):
        order = make_order(user.pk, [(product_a, 3, 1000)])

        response = auth_client.get(f"{URL}{order.pk}/")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == order.pk
        assert body["user_id"] == user.pk
        assert body["status"] == "pending_payment"
        assert body["total_amount"] == 3000
        assert body["receipt_url"] is None
        assert body["items"] == [
            {
                "id": order.items.get().pk,
                "product_id": product_a.pk,
                "quantity": 3,
                "price": 1000,
                "total_price": 3000,
            }
        ]

    def test_admin_sees_any_order(self, admin_client, user, product_a, make_order):
        order = make_order(user.pk, [(product_a, 1, 1000)])
        assert admin_client.get(f"{URL}{order.pk}/").status_code == 200

    def test_other_user_gets_404(self, other_client, user, product_a, make_order):
        order = make_order(user.pk, [(product_a, 1, 1000)])

        response = other_client.get(f"{URL}{order.pk}/")

        assert response.status_code == 404
        assert response.json() == {"error": "order not found"}

    def test_missing_order_is_indistinguishable(self, other_client):
        response = other_client.get(f"{URL}999999/")
        assert response.status_code == 404
        assert response.json() == {"error": "order not found"}

    def test_non_numeric_id_is_400(self, auth_client):
        response = auth_client.get(f"{URL}abc/")
        assert response.status_code == 400
        assert response.json() == {"error": "invalid order id"}
