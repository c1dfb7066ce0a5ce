"""Messaging models."""

import uuid

from django.db import models


class Message(models.Model):
    """A one-way notice from the admin to a single customer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="messages",
    )
    customer_name = models.CharField(max_length=200, blank=True, default="")
    body = models.TextField()
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["customer", "-created_at"], name="message_customer_recent"),
        ]

    def __str__(self):
        return f"To {self.customer_name}: {self.body[:40]}"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "customerId": str(self.customer_id),
            "customerName": self.customer_name,
            "message": self.body,
            "read": self.read,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class Group(models.Model):
    """A named set of customers for picking message recipients."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    members = models.ManyToManyField(
        "customers.Customer",
        related_name="message_groups",
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.name

    def member_ids(self) -> list[str]:
        return [str(c.pk) for c in self.members.all()]

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "memberIds": self.member_ids(),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
