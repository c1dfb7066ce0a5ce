"""Store API URL patterns."""

from django.urls import path

from . import views

app_name = "store"

urlpatterns = [
    path("products", views.ProductsView.as_view(), name="products"),
    path("orders", views.OrdersView.as_view(), name="orders"),
    path("checkout", views.CheckoutView.as_view(), name="checkout"),
]
