"""Customer API URL patterns."""

from django.urls import path

from . import views

app_name = "customers"

urlpatterns = [
    path("customers", views.CustomersView.as_view(), name="customers"),
    path("customers/verify", views.CustomerVerifyView.as_view(), name="verify"),
]
