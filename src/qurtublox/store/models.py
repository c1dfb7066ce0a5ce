"""Catalog and order models."""

from django.db import models
from django.utils import timezone


class Product(models.Model):
    """A catalog item priced in points."""

    class Status(models.TextChoices):
        IN_STOCK = "in_stock", "In stock"
        OUT_OF_STOCK = "out_of_stock", "Out of stock"
        COMING_SOON = "coming_soon", "Coming soon"

    sku = models.CharField(max_length=64, primary_key=True)
    name = models.CharField(max_length=200)
    price = models.PositiveIntegerField(default=0)
    description = models.TextField(blank=True, default="")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.IN_STOCK)
    image_url = models.CharField(max_length=500, blank=True, default="")
    position = models.PositiveIntegerField(default=0)
    revision = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["position", "created_at"]

    def __str__(self):
        return f"{self.sku} {self.name}"

    def __repr__(self):
        return f"<Product(sku={self.sku}, price={self.price}, status={self.status})>"

    @property
    def is_purchasable(self) -> bool:
        return self.status == self.Status.IN_STOCK

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "name": self.name,
            "price": self.price,
            "desc": self.description,
            "status": self.status,
            "imageUrl": self.image_url or None,
            "revision": self.revision,
        }


class Order(models.Model):
    """A placed order with a snapshot of its line items."""

    class Status(models.TextChoices):
        OPEN = "open", "Open"
        COMPLETED = "completed", "Completed"

    id = models.CharField(max_length=32, primary_key=True)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    customer_name = models.CharField(max_length=200, blank=True, default="")
    email = models.CharField(max_length=254, blank=True, default="")
    note = models.TextField(blank=True, default="")
    admin_note = models.TextField(blank=True, default="")
    # [{"sku", "name", "qty", "price"}] as priced at purchase time
    items = models.JSONField(default=list)
    total = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OPEN)
    revision = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.id

    def __repr__(self):
        return f"<Order(id={self.id}, total={self.total}, status={self.status})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "at": self.created_at.isoformat() if self.created_at else None,
            "personName": self.customer_name,
            "customerId": str(self.customer_id) if self.customer_id else None,
            "email": self.email,
            "note": self.note,
            "adminNote": self.admin_note,
            "items": self.items,
            "total": self.total,
            "status": self.status,
            "revision": self.revision,
        }
