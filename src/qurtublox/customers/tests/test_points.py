"""Tests for point balances and debits."""

import pytest
from django.test import override_settings

from qurtublox.core.exceptions import InsufficientPoints, NotFound
from qurtublox.customers.models import Customer
from qurtublox.customers.services import debit_points


@pytest.mark.django_db
class TestAffordability:

    def test_balance_covers_total(self, customer):
        assert customer.can_afford(100)
        assert not customer.can_afford(101)

    def test_unlimited_flag_covers_anything(self, unlimited_customer):
        assert unlimited_customer.can_afford(10_000_000)

    def test_sentinel_balance_is_unlimited(self, db):
        customer = Customer.objects.create(name="Big", email="big@example.com", points=999999)

        assert customer.is_unlimited
        assert customer.can_afford(10_000_000)

    @override_settings(QURTUBLOX={"UNLIMITED_POINTS": 500})
    def test_sentinel_is_configurable(self, db):
        customer = Customer.objects.create(name="Big", email="big@example.com", points=500)

        assert customer.is_unlimited


@pytest.mark.django_db
class TestDebitPoints:

    def test_debits_balance(self, customer):
        updated, debited = debit_points(customer.pk, 30)

        assert debited == 30
        assert updated.points == 70
        customer.refresh_from_db()
        assert customer.points == 70

    def test_exact_balance(self, customer):
        updated, _ = debit_points(customer.pk, 100)

        assert updated.points == 0

    def test_unlimited_customer_never_debited(self, unlimited_customer):
        updated, debited = debit_points(unlimited_customer.pk, 1000)

        assert debited == 0
        assert updated.points == 5

    def test_sentinel_customer_never_debited(self, db):
        customer = Customer.objects.create(name="Big", email="big@example.com", points=999999)

        updated, debited = debit_points(customer.pk, 50)

        assert debited == 0
        assert updated.points == 999999

    def test_insufficient_balance(self, customer):
        with pytest.raises(InsufficientPoints) as exc:
            debit_points(customer.pk, 101)

        assert exc.value.status_code == 409
        assert exc.value.balance == 100
        customer.refresh_from_db()
        assert customer.points == 100

    def test_zero_total_is_noop(self, customer):
        updated, debited = debit_points(customer.pk, 0)

        assert debited == 0
        assert updated.points == 100

    def test_unknown_customer(self, db):
        with pytest.raises(NotFound):
            debit_points("00000000-0000-0000-0000-000000000000", 10)

    def test_second_debit_sees_first(self, customer):
        """Debits apply to the stored balance, not a stale copy."""
        debit_points(customer.pk, 60)

        with pytest.raises(InsufficientPoints):
            debit_points(customer.pk, 60)

        customer.refresh_from_db()
        assert customer.points == 40
