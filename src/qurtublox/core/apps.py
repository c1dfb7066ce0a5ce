"""Core app configuration."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuration for the core application."""

    name = "qurtublox.core"
    verbose_name = "QurtubloX Core"
    default_auto_field = "django.db.models.BigAutoField"
