import pytest

from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.core.identity import Caller, Role
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem
from modules.products.models import Product

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users and callers
# ---------------------------------------------------------------------------


@pytest.fixture()
def user():
    return User.objects.create_user(username="buyer", password="testpass123")


@pytest.fixture()
def other_user():
    return User.objects.create_user(username="stranger", password="testpass123")


@pytest.fixture()
def admin_user():
    return User.objects.create_user(
        username="backoffice", password="testpass123", is_staff=True
    )


@pytest.fixture()
def auth_client(user):
    """APIClient with a force-authenticated regular user."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def other_client(other_user):
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


@pytest.fixture()
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture()
def caller(user):
    return Caller(user_id=user.pk)


@pytest.fixture()
def other_caller(other_user):
    return Caller(user_id=other_user.pk)


@pytest.fixture()
def admin_caller(admin_user):
    return Caller(user_id=admin_user.pk, role=Role.ADMIN)


# ---------------------------------------------------------------------------
# Catalog and orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def product_a():
    return Product.objects.create(name="Keyboard", price=1000, stock_quantity=100)


@pytest.fixture()
def product_b():
    return Product.objects.create(name="Mouse", price=2500, stock_quantity=50)


@pytest.fixture()
def low_stock_product():
    return Product.objects.create(name="Monitor", price=50000, stock_quantity=2)


@pytest.fixture()
def make_order():
    """Insert an order with items directly, bypassing the service."""

    def _make(user_id, items, status=OrderStatus.PENDING_PAYMENT, **fields):
        order = Order.objects.create(
            user_id=user_id,
            status=status,
            pickup_point=fields.pop("pickup_point", "Store #1"),
            total_amount=sum(qty * price for _, qty, price in items),
            **fields,
        )
        for product, quantity, price in items:
            OrderItem.objects.create(
                order=order, product=product, quantity=quantity, price=price
            )
        return order

    return _make
