"""WebSocket broadcast services.

Pushes message events to a customer's notification socket so an open
storefront tab can show new admin messages without polling.

All broadcast calls should go through this service to ensure:

1. Consistent event payload structure
2. Broadcasts happen AFTER transaction commit (no ghost messages)
3. A broadcast failure never fails the main operation

Usage:
    from qurtublox.messaging.services.broadcast import BroadcastService

    with transaction.atomic():
        message = Message.objects.create(...)
        BroadcastService.broadcast_on_commit(message)
    # Broadcast happens here, after commit
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from ..models import Message

logger = logging.getLogger(__name__)


def customer_room(customer_id) -> str:
    """Channel group a customer's sockets join."""
    return f"customer_{customer_id}"


class BroadcastService:
    """Customer notification broadcasts."""

    @staticmethod
    def build_payload(message: Message, event: str = "new_message") -> dict:
        return {
            "type": event,
            "message_id": str(message.pk),
            "customer_id": str(message.customer_id),
            "message": message.body,
            "read": message.read,
            "created_at": message.created_at.isoformat() if message.created_at else None,
        }

    @staticmethod
    def broadcast_payload(customer_id, payload: dict) -> bool:
        """Send one event to a customer's room. Returns True if sent."""
        try:
            channel_layer = get_channel_layer()
            if not channel_layer:
                logger.warning("No channel layer configured, skipping WebSocket broadcast")
                return False

            room_name = customer_room(customer_id)
            async_to_sync(channel_layer.group_send)(room_name, payload)

            logger.debug(
                "Broadcast message via WebSocket",
                extra={
                    "room": room_name,
                    "event": payload.get("type"),
                    "message_id": payload.get("message_id"),
                },
            )
            return True

        except Exception as e:
            # Never fail the main operation if broadcast fails
            logger.exception(f"Failed to broadcast message: {e}")
            return False

    @staticmethod
    def broadcast_message(message: Message, event: str = "new_message") -> bool:
        """Broadcast a message event to its recipient immediately."""
        payload = BroadcastService.build_payload(message, event)
        return BroadcastService.broadcast_payload(message.customer_id, payload)

    @staticmethod
    def broadcast_on_commit(message: Message, event: str = "new_message"):
        """Broadcast after the current transaction commits.

        The payload is captured now so the broadcast does not need the
        message row after commit.
        """
        customer_id = message.customer_id
        payload = BroadcastService.build_payload(message, event)

        def do_broadcast():
            BroadcastService.broadcast_payload(customer_id, payload)

        transaction.on_commit(do_broadcast)
