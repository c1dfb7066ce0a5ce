"""URL configuration for the QurtubloX Store project."""

from django.urls import include, path

from qurtublox.core.views import health_check

urlpatterns = [
    # Health check
    path("health/", health_check, name="health_check"),

    # Customer accounts and sign-in
    path("api/", include("qurtublox.customers.urls", namespace="customers")),

    # Catalog, orders and checkout
    path("api/", include("qurtublox.store.urls", namespace="store")),

    # Messages and recipient groups
    path("api/", include("qurtublox.messaging.urls", namespace="messaging")),
]
