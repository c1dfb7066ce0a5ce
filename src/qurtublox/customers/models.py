"""Customer models."""

import base64
import uuid

from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.db.models.functions import Lower

from qurtublox.core.conf import get_default_points, get_unlimited_points

LEGACY_PASSWORD_PREFIX = "qxpw_"


def legacy_encode_password(raw_password: str) -> str:
    """Reversible encoding used by accounts created before hashed passwords."""
    normalized = raw_password.strip()
    return LEGACY_PASSWORD_PREFIX + base64.b64encode(normalized.encode("utf-8")).decode("ascii")


class Customer(models.Model):
    """A shop account holding a points balance."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    email = models.EmailField(max_length=254)
    password = models.CharField(max_length=128, blank=True, default="")
    points = models.IntegerField(default=get_default_points)
    unlimited = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(Lower("email"), name="customer_email_ci_unique"),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    def __repr__(self):
        return f"<Customer(id={self.id}, email={self.email}, points={self.points})>"

    @property
    def is_unlimited(self) -> bool:
        """Unlimited flag or a balance at the unlimited sentinel."""
        return self.unlimited or self.points >= get_unlimited_points()

    def can_afford(self, total: int) -> bool:
        return self.is_unlimited or self.points >= total

    def has_password(self) -> bool:
        return bool(self.password)

    def has_legacy_password(self) -> bool:
        return self.password.startswith(LEGACY_PASSWORD_PREFIX)

    def set_password(self, raw_password: str):
        self.password = make_password(raw_password.strip())

    def check_password(self, raw_password: str) -> bool:
        if not self.password:
            return False
        if self.has_legacy_password():
            return self.password == legacy_encode_password(raw_password)
        return check_password(raw_password.strip(), self.password)

    def to_dict(self) -> dict:
        """API representation. Never includes the password."""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "points": self.points,
            "unlimited": self.unlimited,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
