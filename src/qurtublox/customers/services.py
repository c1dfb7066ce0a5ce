"""Customer service layer.

Account creation, updates, password verification and point debits.
Views should call these functions instead of manipulating models directly.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from qurtublox.core.api import MAX_INTEGER, is_missing_table
from qurtublox.core.conf import get_unlimited_points
from qurtublox.core.exceptions import (
    Conflict,
    InsufficientPoints,
    InvalidCredentials,
    NotFound,
    ServiceUnavailable,
    ValidationError,
)

from .models import Customer

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists"


def normalize_email(email) -> str:
    """Trim, lowercase and validate an email address."""
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("Email is required")
    email = email.strip().lower()
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError(f"Invalid email address: {email}")
    return email


def parse_points(value) -> int:
    """Coerce a points value from JSON into a non-negative int."""
    if isinstance(value, bool):
        raise ValidationError("Points must be a number")
    try:
        points = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("Points must be a number")
    if points != value and not isinstance(value, str):
        # 12.5 is not a valid balance
        raise ValidationError("Points must be a whole number")
    if points < 0:
        raise ValidationError("Points cannot be negative")
    if points > MAX_INTEGER:
        raise ValidationError("Points value is too large")
    return points


def email_taken(email: str, exclude_id=None) -> bool:
    qs = Customer.objects.filter(email__iexact=email)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs.exists()


def list_customers():
    """All customers, oldest first."""
    return Customer.objects.order_by("created_at")


def get_customer(customer_id) -> Customer:
    """Fetch a customer by id.

    Raises:
        NotFound: No customer with that id (including malformed ids)
    """
    if not customer_id:
        raise ValidationError("Customer id is required")
    try:
        return Customer.objects.get(pk=customer_id)
    except (Customer.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound(f"Customer not found: {customer_id}")


def find_customer_by_email(email: str) -> Customer | None:
    return Customer.objects.filter(email__iexact=email.strip()).first()


@transaction.atomic
def create_customer(
    name: str,
    email: str,
    password: str = None,
    *,
    admin_create: bool = False,
    points=None,
    unlimited: bool = False,
) -> Customer:
    """Register a new customer.

    Self sign-up requires a password. Admin-created accounts may omit it;
    the first successful sign-in then sets it. Only admin-created accounts
    may set a starting balance or the unlimited flag.

    Raises:
        ValidationError: Missing name/email/password or invalid values
        Conflict: Email already registered (case-insensitive)
    """
    name = (name or "").strip() if isinstance(name, str) else ""
    password = password if isinstance(password, str) else ""

    if not name or not email or (not password.strip() and not admin_create):
        raise ValidationError("Name, email, and password are required")

    email = normalize_email(email)
    if email_taken(email):
        raise Conflict(DUPLICATE_EMAIL_MESSAGE)

    customer = Customer(name=name, email=email)
    if password.strip():
        customer.set_password(password)
    if admin_create:
        if points is not None:
            customer.points = parse_points(points)
        customer.unlimited = bool(unlimited)

    try:
        with transaction.atomic():
            customer.save()
    except IntegrityError:
        # Lost a race with a concurrent sign-up for the same email
        raise Conflict(DUPLICATE_EMAIL_MESSAGE)

    logger.info(
        "Customer created",
        extra={"customer_id": str(customer.pk), "admin_create": admin_create},
    )
    return customer


@transaction.atomic
def update_customer(
    customer_id,
    name: str,
    email: str = None,
    points=None,
    unlimited: bool = False,
    password: str = None,
) -> Customer:
    """Overwrite a customer's profile and balance.

    The balance is written as given: this path does not check that the
    customer could afford whatever the caller deducted. Checkout goes
    through ``debit_points`` instead.

    Raises:
        ValidationError: Missing id/name or invalid values
        NotFound: Unknown customer
        Conflict: Email belongs to another account
    """
    if not customer_id or not isinstance(name, str) or not name.strip():
        raise ValidationError("Invalid customer data")

    customer = get_customer(customer_id)
    customer.name = name.strip()

    if email:
        email = normalize_email(email)
        if email != customer.email.lower() and email_taken(email, exclude_id=customer.pk):
            raise Conflict(DUPLICATE_EMAIL_MESSAGE)
        customer.email = email

    if points is not None:
        customer.points = parse_points(points)
    customer.unlimited = bool(unlimited)

    if isinstance(password, str) and password.strip():
        customer.set_password(password)

    try:
        with transaction.atomic():
            customer.save()
    except IntegrityError:
        raise Conflict(DUPLICATE_EMAIL_MESSAGE)

    logger.info("Customer updated", extra={"customer_id": str(customer.pk)})
    return customer


def delete_customer(customer_id) -> None:
    """Delete a customer.

    Their messages and group memberships go with them; orders keep their
    name snapshot with the customer reference cleared.
    """
    customer = get_customer(customer_id)
    customer.delete()
    logger.info("Customer deleted", extra={"customer_id": str(customer_id)})


def verify_customer(password: str, customer_id=None, email: str = None) -> Customer:
    """Check a sign-in attempt by id or email.

    A customer without a password (admin-created) gets this password set.
    Accounts still holding the legacy reversible encoding are upgraded to a
    proper hash on their first successful sign-in.

    Raises:
        ValidationError: Missing password, or neither id nor email given
        NotFound: No such account
        InvalidCredentials: Wrong password
        ServiceUnavailable: Customers table is missing
    """
    if not isinstance(password, str) or not password:
        raise ValidationError("Missing password")
    if not customer_id and not email:
        raise ValidationError("Missing id or email")

    try:
        if email:
            customer = find_customer_by_email(str(email))
        else:
            try:
                customer = Customer.objects.filter(pk=customer_id).first()
            except (DjangoValidationError, ValueError):
                customer = None
    except DatabaseError as e:
        if is_missing_table(e):
            raise ServiceUnavailable("Database not initialized. Please try again.")
        raise

    if customer is None:
        raise NotFound("Account not found. Please check your email or sign up.")

    if not customer.has_password():
        customer.set_password(password)
        customer.save(update_fields=["password", "updated_at"])
        logger.info("Password set on first sign-in", extra={"customer_id": str(customer.pk)})
        return customer

    if not customer.check_password(password):
        raise InvalidCredentials("Invalid password. Please try again.")

    if customer.has_legacy_password():
        customer.set_password(password)
        customer.save(update_fields=["password", "updated_at"])
        logger.info("Upgraded legacy password encoding", extra={"customer_id": str(customer.pk)})

    return customer


@transaction.atomic
def debit_points(customer_id, total: int) -> tuple[Customer, int]:
    """Debit ``total`` points in a single conditional UPDATE.

    Unlimited customers (flag or sentinel balance) are never debited.

    Returns:
        (customer, points_debited)

    Raises:
        NotFound: Unknown customer
        InsufficientPoints: Balance does not cover the total
    """
    customer = get_customer(customer_id)
    if total <= 0:
        return customer, 0

    updated = Customer.objects.filter(
        pk=customer.pk,
        unlimited=False,
        points__lt=get_unlimited_points(),
        points__gte=total,
    ).update(points=F("points") - total, updated_at=timezone.now())

    customer.refresh_from_db()
    if updated:
        logger.info(
            "Points debited",
            extra={"customer_id": str(customer.pk), "total": total, "balance": customer.points},
        )
        return customer, total

    if customer.is_unlimited:
        return customer, 0

    raise InsufficientPoints(customer.points, total)
