"""Tests for the messages API.

GET/POST/PUT /api/messages
"""

from unittest.mock import patch

import pytest
from django.urls import reverse

from qurtublox.messaging.models import Message


@pytest.fixture
def url():
    return reverse("messaging:messages")


def send(client, url, customer_ids, text="Shop opens at noon"):
    return client.post(
        url,
        {"customerIds": customer_ids, "message": text},
        content_type="application/json",
    )


@pytest.mark.django_db
class TestSendMessages:
    """Tests for POST /api/messages"""

    def test_one_message_per_recipient(self, client, url, customer, other_customer):
        response = send(client, url, [str(customer.pk), str(other_customer.pk)])

        assert response.status_code == 200
        data = response.json()
        assert [m["customerName"] for m in data] == ["Amina Test", "Bilal Test"]
        assert all(m["message"] == "Shop opens at noon" and m["read"] is False for m in data)
        assert Message.objects.count() == 2

    def test_duplicate_recipients_get_one_message(self, client, url, customer):
        send(client, url, [str(customer.pk), str(customer.pk)])

        assert Message.objects.count() == 1

    @pytest.mark.parametrize("payload", [
        {"message": "hi"},
        {"customerIds": [], "message": "hi"},
        {"customerIds": ["x"]},
        {"customerIds": ["x"], "message": "   "},
    ])
    def test_missing_fields(self, client, url, payload):
        response = client.post(url, payload, content_type="application/json")

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields"

    def test_unknown_recipient(self, client, url, customer):
        response = send(client, url, [str(customer.pk), "00000000-0000-0000-0000-000000000000"])

        assert response.status_code == 400
        assert "Unknown customer ids" in response.json()["error"]
        assert not Message.objects.exists()

    def test_recipients_notified_after_commit(
        self, client, url, customer, other_customer, django_capture_on_commit_callbacks
    ):
        with patch(
            "qurtublox.messaging.services.broadcast.BroadcastService.broadcast_payload"
        ) as broadcast:
            with django_capture_on_commit_callbacks(execute=True):
                send(client, url, [str(customer.pk), str(other_customer.pk)])

        assert broadcast.call_count == 2
        customer_id, payload = broadcast.call_args_list[0].args
        assert customer_id == customer.pk
        assert payload["type"] == "new_message"
        assert payload["message"] == "Shop opens at noon"


@pytest.mark.django_db
class TestListMessages:
    """Tests for GET /api/messages"""

    def test_all_messages_newest_first(self, client, url, customer, other_customer):
        send(client, url, [str(customer.pk)], "first")
        send(client, url, [str(other_customer.pk)], "second")

        data = client.get(url).json()

        assert [m["message"] for m in data] == ["second", "first"]

    def test_filter_by_customer(self, client, url, customer, other_customer):
        send(client, url, [str(customer.pk), str(other_customer.pk)])

        data = client.get(url, {"customerId": str(customer.pk)}).json()

        assert len(data) == 1
        assert data[0]["customerId"] == str(customer.pk)

    def test_filter_by_malformed_id(self, client, url, customer):
        send(client, url, [str(customer.pk)])

        response = client.get(url, {"customerId": "not-a-uuid"})

        assert response.status_code == 200
        assert response.json() == []


@pytest.mark.django_db
class TestMarkRead:
    """Tests for PUT /api/messages"""

    def test_mark_read_is_idempotent(self, client, url, customer):
        message_id = send(client, url, [str(customer.pk)]).json()[0]["id"]

        first = client.put(url, {"id": message_id, "read": True}, content_type="application/json")
        second = client.put(url, {"id": message_id, "read": True}, content_type="application/json")

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["read"] is True
        assert Message.objects.get(pk=message_id).read is True

    def test_read_defaults_to_true(self, client, url, customer):
        message_id = send(client, url, [str(customer.pk)]).json()[0]["id"]

        response = client.put(url, {"id": message_id}, content_type="application/json")

        assert response.json()["read"] is True

    def test_mark_unread(self, client, url, customer):
        message_id = send(client, url, [str(customer.pk)]).json()[0]["id"]
        client.put(url, {"id": message_id, "read": True}, content_type="application/json")

        client.put(url, {"id": message_id, "read": False}, content_type="application/json")

        assert Message.objects.get(pk=message_id).read is False

    def test_missing_id(self, client, url):
        response = client.put(url, {"read": True}, content_type="application/json")

        assert response.status_code == 400
        assert response.json()["error"] == "Missing message ID"

    def test_unknown_message(self, client, url):
        response = client.put(
            url,
            {"id": "00000000-0000-0000-0000-000000000000", "read": True},
            content_type="application/json",
        )

        assert response.status_code == 404

    def test_messages_removed_with_customer(self, client, url, customer):
        send(client, url, [str(customer.pk)])

        client.delete(reverse("customers:customers"), {"id": str(customer.pk)}, content_type="application/json")

        assert not Message.objects.exists()
