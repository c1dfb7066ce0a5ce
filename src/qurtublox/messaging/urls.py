"""Messaging API URL patterns."""

from django.urls import path

from . import views

app_name = "messaging"

urlpatterns = [
    path("messages", views.MessagesView.as_view(), name="messages"),
    path("groups", views.GroupsView.as_view(), name="groups"),
]
