"""Tests for live customer notifications.

BroadcastService pushes events to a customer's channel group;
NotificationConsumer relays them to the storefront socket.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from qurtublox.messaging.models import Message
from qurtublox.messaging.routing import websocket_urlpatterns
from qurtublox.messaging.services.broadcast import BroadcastService, customer_room


@pytest.fixture
def message(customer):
    return Message.objects.create(customer=customer, customer_name=customer.name, body="Sale today")


@pytest.mark.django_db
class TestBroadcastService:

    def test_sends_to_customer_room(self, message, customer):
        layer = MagicMock()
        layer.group_send = AsyncMock()
        with patch("qurtublox.messaging.services.broadcast.get_channel_layer", return_value=layer):
            sent = BroadcastService.broadcast_message(message)

        assert sent is True
        room, payload = layer.group_send.call_args.args
        assert room == f"customer_{customer.pk}"
        assert payload["type"] == "new_message"
        assert payload["message_id"] == str(message.pk)
        assert payload["message"] == "Sale today"

    def test_no_channel_layer(self, message):
        with patch("qurtublox.messaging.services.broadcast.get_channel_layer", return_value=None):
            assert BroadcastService.broadcast_message(message) is False

    def test_failure_does_not_raise(self, message):
        layer = MagicMock()
        layer.group_send = AsyncMock(side_effect=ConnectionError("redis down"))
        with patch("qurtublox.messaging.services.broadcast.get_channel_layer", return_value=layer):
            assert BroadcastService.broadcast_message(message) is False

    def test_on_commit_waits_for_commit(self, message, django_capture_on_commit_callbacks):
        with patch.object(BroadcastService, "broadcast_payload") as broadcast:
            with django_capture_on_commit_callbacks() as callbacks:
                BroadcastService.broadcast_on_commit(message)
            broadcast.assert_not_called()

            callbacks[0]()

        broadcast.assert_called_once()


@pytest.mark.django_db(transaction=True)
class TestNotificationConsumer:

    def test_relays_new_message(self):
        customer_id = str(uuid.uuid4())

        async def scenario():
            application = URLRouter(websocket_urlpatterns)
            communicator = WebsocketCommunicator(application, f"/ws/notifications/{customer_id}/")
            connected, _ = await communicator.connect()
            assert connected

            greeting = await communicator.receive_json_from()
            assert greeting == {"type": "connection_established", "room": customer_room(customer_id)}

            await get_channel_layer().group_send(customer_room(customer_id), {
                "type": "new_message",
                "message_id": "m-1",
                "message": "Sale today",
                "created_at": None,
            })
            event = await communicator.receive_json_from()

            await communicator.send_json_to({"type": "ping"})
            pong = await communicator.receive_json_from()

            await communicator.disconnect()
            return event, pong

        event, pong = async_to_sync(scenario)()

        assert event == {
            "type": "new_message",
            "message_id": "m-1",
            "message": "Sale today",
            "created_at": None,
        }
        assert pong == {"type": "pong"}
