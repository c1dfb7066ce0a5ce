"""WebSocket consumer for live customer notifications."""

import json
import logging

from asgiref.sync import async_to_sync
from channels.generic.websocket import WebsocketConsumer

from .services.broadcast import customer_room

logger = logging.getLogger(__name__)


class NotificationConsumer(WebsocketConsumer):
    """Delivers admin messages to a signed-in storefront tab.

    Connect to /ws/notifications/<customer_id>/. Messages are created over
    the HTTP API; this socket only relays the resulting events.
    """

    def connect(self):
        """Handle WebSocket connection."""
        self.room_group_name = None

        kwargs = self.scope.get("url_route", {}).get("kwargs", {})
        customer_id = kwargs.get("customer_id")
        if not customer_id:
            logger.warning("Invalid WebSocket route")
            self.close()
            return

        self.customer_id = str(customer_id)
        self.room_group_name = customer_room(self.customer_id)

        # Join room group
        try:
            async_to_sync(self.channel_layer.group_add)(
                self.room_group_name,
                self.channel_name
            )
        except Exception as e:
            logger.exception(f"Failed to join channel group: {e}")
            self.room_group_name = None
            self.close()
            return

        self.accept()
        logger.info(f"WebSocket connected: {self.room_group_name}")

        self.send(text_data=json.dumps({
            "type": "connection_established",
            "room": self.room_group_name,
        }))

    def disconnect(self, close_code):
        """Handle WebSocket disconnection."""
        if self.room_group_name:
            async_to_sync(self.channel_layer.group_discard)(
                self.room_group_name,
                self.channel_name
            )
            logger.info(f"WebSocket disconnected: {self.room_group_name}")

    def receive(self, text_data=None, bytes_data=None):
        """Only pings are accepted from the client."""
        try:
            data = json.loads(text_data or "{}")
        except json.JSONDecodeError:
            logger.warning("Invalid JSON in WebSocket message")
            return
        if data.get("type") == "ping":
            self.send(text_data=json.dumps({"type": "pong"}))

    def new_message(self, event):
        """Notify about a new message (sent from HTTP API)."""
        self.send(text_data=json.dumps({
            "type": "new_message",
            "message_id": event.get("message_id"),
            "message": event.get("message"),
            "created_at": event.get("created_at"),
        }))

    def message_read(self, event):
        """A message was marked read in another tab."""
        self.send(text_data=json.dumps({
            "type": "message_read",
            "message_id": event.get("message_id"),
        }))
