"""WebSocket URL patterns."""

from django.urls import path

from . import consumers

websocket_urlpatterns = [
    path(
        "ws/notifications/<uuid:customer_id>/",
        consumers.NotificationConsumer.as_asgi(),
        name="notifications",
    ),
]
