"""Store service layer.

Catalog and order persistence plus server-side checkout.

Bulk saves replace a whole collection from the admin console's list. Each
row is upserted on its own; a row carrying a ``revision`` is only written
if nobody changed it since the client read it. Any conflict aborts the
whole save. Rows missing from the list are only deleted if the client had
loaded them.
"""

import logging
import string

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django.utils.crypto import get_random_string
from django.utils.dateparse import parse_datetime

from qurtublox.core.api import MAX_INTEGER
from qurtublox.core.conf import get_default_products, get_setting
from qurtublox.core.exceptions import NotFound, StaleCollection, StaleRevision, ValidationError
from qurtublox.customers.models import Customer
from qurtublox.customers.services import debit_points

from .models import Order, Product

logger = logging.getLogger(__name__)

ORDER_ID_CHARS = string.ascii_uppercase + string.digits


# =============================================================================
# Parsing helpers
# =============================================================================


def _whole_number(value, field: str) -> int:
    """Non-negative integer from a JSON number (or numeric string)."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, float) and number != value:
        raise ValidationError(f"{field} must be a whole number")
    if number < 0:
        raise ValidationError(f"{field} cannot be negative")
    if number > MAX_INTEGER:
        raise ValidationError(f"{field} is too large")
    return number


def _optional_revision(row: dict):
    revision = row.get("revision")
    if revision is None:
        return None
    return _whole_number(revision, "revision")


def parse_product_status(row: dict) -> str:
    """Tri-state status; a boolean ``inStock`` is accepted as a fallback."""
    status = row.get("status")
    if status is None and "inStock" in row:
        return Product.Status.IN_STOCK if row["inStock"] else Product.Status.OUT_OF_STOCK
    if status is None:
        return Product.Status.IN_STOCK
    if status not in Product.Status.values:
        raise ValidationError(
            f"Invalid status: {status}. Must be one of {list(Product.Status.values)}"
        )
    return status


def parse_product(row, position: int) -> dict:
    if not isinstance(row, dict):
        raise ValidationError("Each product must be an object")
    sku = str(row.get("sku") or "").strip()
    name = str(row.get("name") or "").strip()
    if not sku or not name:
        raise ValidationError("Each product needs a sku and a name")
    return {
        "sku": sku,
        "name": name,
        "price": _whole_number(row.get("price", 0), "price"),
        "description": str(row.get("desc") or ""),
        "status": parse_product_status(row),
        "image_url": row.get("imageUrl") or get_setting("DEFAULT_PRODUCT_IMAGE"),
        "position": position,
        "revision": _optional_revision(row),
    }


def parse_order_items(items) -> list[dict]:
    if not isinstance(items, list):
        raise ValidationError("Order items must be a list")
    parsed = []
    for item in items:
        if not isinstance(item, dict) or not item.get("sku"):
            raise ValidationError("Each order item needs a sku")
        qty = _whole_number(item.get("qty", 1), "qty")
        if qty < 1:
            raise ValidationError("qty must be at least 1")
        parsed.append({
            "sku": str(item["sku"]),
            "name": str(item.get("name") or ""),
            "qty": qty,
            "price": _whole_number(item.get("price", 0), "price"),
        })
    return parsed


def _resolve_customer_id(customer_id):
    """Existing customer pk for a client-supplied id, or None."""
    if not customer_id:
        return None
    try:
        customer = Customer.objects.filter(pk=customer_id).first()
    except (DjangoValidationError, ValueError):
        customer = None
    if customer is None:
        logger.warning("Order references unknown customer", extra={"customer_id": str(customer_id)})
        return None
    return customer.pk


def parse_order(row) -> dict:
    if not isinstance(row, dict):
        raise ValidationError("Each order must be an object")

    items = parse_order_items(row.get("items") or [])
    if row.get("total") is None:
        total = sum(item["qty"] * item["price"] for item in items)
        if total > MAX_INTEGER:
            raise ValidationError("total is too large")
    else:
        total = _whole_number(row["total"], "total")

    status = row.get("status") or Order.Status.OPEN
    if status not in Order.Status.values:
        raise ValidationError(f"Invalid order status: {status}")

    created_at = None
    if row.get("at"):
        try:
            created_at = parse_datetime(str(row["at"]))
        except ValueError:
            created_at = None
        if created_at is None:
            raise ValidationError(f"Invalid order timestamp: {row['at']}")
        if timezone.is_naive(created_at):
            created_at = timezone.make_aware(created_at)

    return {
        "id": str(row.get("id") or "").strip() or None,
        "customer_id": _resolve_customer_id(row.get("customerId")),
        "customer_name": str(row.get("personName") or ""),
        "email": str(row.get("email") or ""),
        "note": str(row.get("note") or ""),
        "admin_note": str(row.get("adminNote") or ""),
        "items": items,
        "total": total,
        "status": status,
        "created_at": created_at,
        "revision": _optional_revision(row),
    }


def _ensure_unique(keys, label):
    seen = set()
    for key in keys:
        if key in seen:
            raise ValidationError(f"Duplicate {label}: {key}")
        seen.add(key)


def _upsert(model, pk, fields: dict, revision, existing: set) -> bool:
    """Update or create one row. Returns True when a row was created.

    Raises:
        StaleRevision: ``revision`` given and the stored row differs or is gone
    """
    if pk in existing:
        qs = model.objects.filter(pk=pk)
        if revision is not None:
            qs = qs.filter(revision=revision)
        updated = qs.update(
            **fields,
            revision=F("revision") + 1,
            updated_at=timezone.now(),
        )
        if not updated:
            raise StaleRevision(model.__name__, pk, revision)
        return False

    if revision is not None:
        # Client edited a row that has since been deleted
        raise StaleRevision(model.__name__, pk, revision)
    model.objects.create(pk=pk, **fields)
    return True


def _delete_absent(model, kept_pks, version) -> int:
    """Delete rows missing from a bulk save that the client had loaded.

    Rows written after ``version`` were never seen by the client, so the
    save is rejected rather than deleting them.

    Raises:
        ValidationError: Rows would be deleted but no version was sent
        StaleCollection: An absent row changed after ``version``
    """
    absent = model.objects.exclude(pk__in=kept_pks)
    if not absent.exists():
        return 0
    if version is None:
        raise ValidationError("Collection version is required to remove rows")

    deleted, _ = absent.filter(updated_at__lte=version).delete()

    unseen = list(model.objects.exclude(pk__in=kept_pks).values_list("pk", flat=True)[:20])
    if unseen:
        raise StaleCollection(model.__name__, [str(pk) for pk in unseen])
    return deleted


# =============================================================================
# Products
# =============================================================================


def list_products() -> list[dict]:
    """Catalog in admin order; the configured defaults when it is empty."""
    products = list(Product.objects.order_by("position", "created_at"))
    if not products:
        logger.info("No products found, returning defaults")
        return get_default_products()
    return [p.to_dict() for p in products]


@transaction.atomic
def save_products(rows, version=None) -> dict:
    """Replace the catalog with ``rows``.

    Products missing from ``rows`` are deleted only if they were last
    written at or before ``version``, the collection version the client
    loaded.

    Returns:
        Counts of created, updated and deleted products

    Raises:
        ValidationError: Malformed row or duplicate sku
        StaleRevision: A row was changed by someone else
        StaleCollection: A product the client never saw would be deleted
    """
    if not isinstance(rows, list):
        raise ValidationError("Expected a list of products")

    parsed = [parse_product(row, position) for position, row in enumerate(rows)]
    skus = [p["sku"] for p in parsed]
    _ensure_unique(skus, "sku")

    existing = set(Product.objects.filter(pk__in=skus).values_list("pk", flat=True))
    created = updated = 0
    for fields in parsed:
        sku = fields.pop("sku")
        revision = fields.pop("revision")
        if _upsert(Product, sku, fields, revision, existing):
            created += 1
        else:
            updated += 1

    deleted = _delete_absent(Product, skus, version)

    logger.info(
        f"Saved {len(parsed)} products",
        extra={"rows_created": created, "rows_updated": updated, "rows_deleted": deleted},
    )
    return {"created": created, "updated": updated, "deleted": deleted}


def seed_default_products() -> int:
    """Write the default catalog if the product table is empty."""
    if Product.objects.exists():
        return 0
    result = save_products(get_default_products())
    return result["created"]


# =============================================================================
# Orders
# =============================================================================


def new_order_id() -> str:
    while True:
        order_id = "ORD-" + get_random_string(6, allowed_chars=ORDER_ID_CHARS)
        if not Order.objects.filter(pk=order_id).exists():
            return order_id


def list_orders():
    """All orders, newest first."""
    return Order.objects.order_by("-created_at")


def get_order(order_id) -> Order:
    if not order_id:
        raise ValidationError("Order id is required")
    try:
        return Order.objects.get(pk=order_id)
    except Order.DoesNotExist:
        raise NotFound(f"Order not found: {order_id}")


@transaction.atomic
def save_orders(rows, version=None) -> dict:
    """Replace the order collection with ``rows``.

    Orders without an id get a fresh ``ORD-XXXXXX`` id. Unknown customer
    references are stored as null with the name snapshot kept.
    Orders missing from ``rows`` are deleted only if the client loaded them
    (see ``_delete_absent``); an order placed since then aborts the save.
    """
    if not isinstance(rows, list):
        raise ValidationError("Expected a list of orders")

    parsed = [parse_order(row) for row in rows]
    for fields in parsed:
        if not fields["id"]:
            fields["id"] = new_order_id()
    ids = [o["id"] for o in parsed]
    _ensure_unique(ids, "order id")

    existing = set(Order.objects.filter(pk__in=ids).values_list("pk", flat=True))
    created = updated = 0
    for fields in parsed:
        order_id = fields.pop("id")
        revision = fields.pop("revision")
        if fields["created_at"] is None:
            if order_id in existing:
                # Keep the stored timestamp
                fields.pop("created_at")
            else:
                fields["created_at"] = timezone.now()
        if _upsert(Order, order_id, fields, revision, existing):
            created += 1
        else:
            updated += 1

    deleted = _delete_absent(Order, ids, version)

    logger.info(
        f"Saved {len(parsed)} orders",
        extra={"rows_created": created, "rows_updated": updated, "rows_deleted": deleted},
    )
    return {"created": created, "updated": updated, "deleted": deleted}


@transaction.atomic
def update_order(order_id, status: str = None, admin_note: str = None, revision=None) -> Order:
    """Change one order's status and/or admin note.

    Raises:
        NotFound: Unknown order
        ValidationError: Invalid status
        StaleRevision: ``revision`` given and out of date
    """
    order = get_order(order_id)
    fields = {}
    if status is not None:
        if status not in Order.Status.values:
            raise ValidationError(f"Invalid order status: {status}")
        fields["status"] = status
    if admin_note is not None:
        fields["admin_note"] = str(admin_note)
    if not fields:
        return order

    if revision is not None:
        revision = _whole_number(revision, "revision")
    _upsert(Order, order.pk, fields, revision, {order.pk})
    order.refresh_from_db()
    logger.info("Order updated", extra={"order_id": order.pk, "fields": sorted(fields)})
    return order


def delete_order(order_id) -> None:
    order = get_order(order_id)
    order.delete()
    logger.info("Order deleted", extra={"order_id": order_id})


# =============================================================================
# Checkout
# =============================================================================


def _price_cart(items) -> tuple[list[dict], int]:
    """Price cart lines from the catalog.

    Duplicate skus are merged. Client-supplied prices are ignored.
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("Cart is empty")

    quantities = {}
    for item in items:
        if not isinstance(item, dict) or not item.get("sku"):
            raise ValidationError("Each cart item needs a sku")
        qty = _whole_number(item.get("qty", 1), "qty")
        if qty < 1:
            raise ValidationError("qty must be at least 1")
        sku = str(item["sku"])
        quantities[sku] = quantities.get(sku, 0) + qty

    products = Product.objects.in_bulk(list(quantities))
    lines = []
    total = 0
    for sku, qty in quantities.items():
        product = products.get(sku)
        if product is None:
            raise ValidationError(f"Unknown product: {sku}")
        if not product.is_purchasable:
            raise ValidationError(f"{product.name} is not available")
        lines.append({"sku": sku, "name": product.name, "qty": qty, "price": product.price})
        total += product.price * qty
    if total > MAX_INTEGER:
        raise ValidationError("Order total is too large")
    return lines, total


@transaction.atomic
def checkout(customer_id, items, note: str = "") -> tuple[Order, Customer]:
    """Place an order paid in points.

    The debit and the order row commit together: if creating the order
    fails, the balance is restored.

    Raises:
        ValidationError: Empty cart, unknown or unavailable product
        NotFound: Unknown customer
        InsufficientPoints: Balance does not cover the total
    """
    if not customer_id:
        raise ValidationError("Customer id is required")

    lines, total = _price_cart(items)
    customer, debited = debit_points(customer_id, total)

    order = Order.objects.create(
        id=new_order_id(),
        customer=customer,
        customer_name=customer.name,
        email=customer.email,
        note=str(note or ""),
        items=lines,
        total=total,
        status=Order.Status.OPEN,
    )

    logger.info(
        "Order placed",
        extra={
            "order_id": order.pk,
            "customer_id": str(customer.pk),
            "total": total,
            "debited": debited,
        },
    )
    return order, customer
