"""Shared pytest fixtures for the QurtubloX Store tests."""

import pytest
from django.test import Client

from qurtublox.customers.models import Customer
from qurtublox.store.models import Product


@pytest.fixture
def client():
    """Return a Django test client."""
    return Client()


@pytest.fixture
def customer(db):
    """Create a customer with the default balance."""
    customer = Customer(
        name="Amina Test",
        email="amina@example.com",
        points=100,
    )
    customer.set_password("testpass123")
    customer.save()
    return customer


@pytest.fixture
def other_customer(db):
    """Create a second customer."""
    customer = Customer(
        name="Bilal Test",
        email="bilal@example.com",
        points=40,
    )
    customer.set_password("otherpass123")
    customer.save()
    return customer


@pytest.fixture
def unlimited_customer(db):
    """Create a customer with the unlimited flag set."""
    customer = Customer(
        name="Vip Test",
        email="vip@example.com",
        points=5,
        unlimited=True,
    )
    customer.set_password("vippass123")
    customer.save()
    return customer


@pytest.fixture
def products(db):
    """Create a small catalog."""
    return [
        Product.objects.create(
            sku="QP-SHIRT-001",
            name="QurtubloX T-Shirt",
            price=25,
            description="Premium cotton t-shirt",
            status=Product.Status.IN_STOCK,
            position=0,
        ),
        Product.objects.create(
            sku="QP-HOODIE-001",
            name="QurtubloX Hoodie",
            price=45,
            description="Warm hoodie",
            status=Product.Status.IN_STOCK,
            position=1,
        ),
        Product.objects.create(
            sku="QP-CAP-001",
            name="QurtubloX Cap",
            price=15,
            description="Stylish cap",
            status=Product.Status.COMING_SOON,
            position=2,
        ),
    ]
