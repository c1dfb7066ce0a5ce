"""Tests for POST /api/customers/verify"""

from unittest.mock import patch

import pytest
from django.db import ProgrammingError
from django.urls import reverse

from qurtublox.customers.models import Customer, legacy_encode_password


@pytest.fixture
def url():
    return reverse("customers:verify")


@pytest.mark.django_db
class TestVerifyCustomer:

    def test_sign_in_by_email_is_case_insensitive(self, client, url, customer):
        response = client.post(
            url,
            {"email": "  AMINA@Example.com ", "password": "testpass123"},
            content_type="application/json",
        )

        assert response.status_code == 200
        assert response.json()["id"] == str(customer.pk)
        assert "password" not in response.json()

    def test_sign_in_by_id(self, client, url, customer):
        response = client.post(
            url,
            {"id": str(customer.pk), "password": "testpass123"},
            content_type="application/json",
        )

        assert response.status_code == 200
        assert response.json()["email"] == "amina@example.com"

    def test_password_is_trimmed(self, client, url, customer):
        response = client.post(
            url,
            {"email": "amina@example.com", "password": " testpass123 "},
            content_type="application/json",
        )

        assert response.status_code == 200

    def test_wrong_password(self, client, url, customer):
        response = client.post(
            url,
            {"email": "amina@example.com", "password": "wrong"},
            content_type="application/json",
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid password. Please try again."

    def test_unknown_account(self, client, url):
        response = client.post(
            url,
            {"email": "nobody@example.com", "password": "x"},
            content_type="application/json",
        )

        assert response.status_code == 404

    def test_unknown_malformed_id(self, client, url):
        response = client.post(url, {"id": "12345", "password": "x"}, content_type="application/json")

        assert response.status_code == 404

    def test_missing_password(self, client, url, customer):
        response = client.post(url, {"email": "amina@example.com"}, content_type="application/json")

        assert response.status_code == 400
        assert response.json()["error"] == "Missing password"

    def test_missing_identifier(self, client, url):
        response = client.post(url, {"password": "x"}, content_type="application/json")

        assert response.status_code == 400
        assert response.json()["error"] == "Missing id or email"

    def test_first_sign_in_sets_password(self, client, url):
        walk_in = Customer.objects.create(name="Walk In", email="walkin@example.com")

        first = client.post(
            url,
            {"email": "walkin@example.com", "password": "chosen"},
            content_type="application/json",
        )
        second = client.post(
            url,
            {"email": "walkin@example.com", "password": "different"},
            content_type="application/json",
        )

        assert first.status_code == 200
        assert second.status_code == 401
        walk_in.refresh_from_db()
        assert walk_in.check_password("chosen")

    def test_legacy_password_upgraded(self, client, url, customer):
        customer.password = legacy_encode_password("oldpass")
        customer.save()

        response = client.post(
            url,
            {"email": "amina@example.com", "password": "oldpass"},
            content_type="application/json",
        )

        assert response.status_code == 200
        customer.refresh_from_db()
        assert not customer.has_legacy_password()
        assert customer.check_password("oldpass")

    def test_legacy_password_wrong(self, client, url, customer):
        customer.password = legacy_encode_password("oldpass")
        customer.save()

        response = client.post(
            url,
            {"email": "amina@example.com", "password": "nope"},
            content_type="application/json",
        )

        assert response.status_code == 401
        customer.refresh_from_db()
        assert customer.has_legacy_password()

    def test_missing_table_is_service_unavailable(self, client, url):
        error = ProgrammingError('relation "customers_customer" does not exist')
        with patch("qurtublox.customers.services.find_customer_by_email", side_effect=error):
            response = client.post(
                url,
                {"email": "amina@example.com", "password": "x"},
                content_type="application/json",
            )

        assert response.status_code == 503
        assert response.json()["error"] == "Database not initialized. Please try again."
