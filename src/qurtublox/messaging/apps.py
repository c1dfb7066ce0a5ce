"""Django app configuration for messaging."""

from django.apps import AppConfig


class MessagingConfig(AppConfig):
    """App configuration for customer messaging."""

    name = "qurtublox.messaging"
    verbose_name = "Messaging"
    default_auto_field = "django.db.models.BigAutoField"
