"""Message and group service layer.

Views should call these functions instead of manipulating models directly.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from qurtublox.core.exceptions import NotFound, ValidationError
from qurtublox.customers.models import Customer

from ..models import Group, Message
from .broadcast import BroadcastService

logger = logging.getLogger(__name__)


def resolve_customers(customer_ids) -> list[Customer]:
    """Customers for a list of ids, de-duplicated, in the given order.

    Raises:
        ValidationError: Not a list, or any id is unknown
    """
    if not isinstance(customer_ids, list):
        raise ValidationError("Customer ids must be a list")

    ordered_ids = list(dict.fromkeys(str(cid) for cid in customer_ids if cid))
    found = {}
    unknown = []
    for cid in ordered_ids:
        try:
            customer = Customer.objects.filter(pk=cid).first()
        except (DjangoValidationError, ValueError):
            customer = None
        if customer is None:
            unknown.append(cid)
        else:
            found[cid] = customer

    if unknown:
        raise ValidationError(f"Unknown customer ids: {', '.join(unknown)}")
    return [found[cid] for cid in ordered_ids]


# =============================================================================
# Messages
# =============================================================================


def list_messages(customer_id=None):
    """Messages newest first, optionally for one customer."""
    qs = Message.objects.order_by("-created_at")
    if customer_id:
        try:
            qs = qs.filter(customer_id=customer_id)
        except (DjangoValidationError, ValueError):
            return Message.objects.none()
    return qs


@transaction.atomic
def send_messages(customer_ids, text) -> list[Message]:
    """Create one message per distinct recipient.

    Each recipient's open notification sockets are pushed the message
    once the transaction commits.

    Raises:
        ValidationError: No recipients, empty text or unknown ids
    """
    if not customer_ids or not isinstance(text, str) or not text.strip():
        raise ValidationError("Missing required fields")

    recipients = resolve_customers(customer_ids)
    if not recipients:
        raise ValidationError("Missing required fields")

    body = text.strip()
    messages = []
    for customer in recipients:
        message = Message.objects.create(
            customer=customer,
            customer_name=customer.name or "Customer",
            body=body,
        )
        BroadcastService.broadcast_on_commit(message)
        messages.append(message)

    logger.info(f"Sent message to {len(messages)} customers")
    return messages


def set_read(message_id, read: bool = True) -> Message:
    """Set a message's read flag. Repeating the call changes nothing.

    Raises:
        ValidationError: Missing id
        NotFound: Unknown message
    """
    if not message_id:
        raise ValidationError("Missing message ID")
    try:
        message = Message.objects.get(pk=message_id)
    except (Message.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound(f"Message not found: {message_id}")

    read = bool(read)
    if message.read != read:
        message.read = read
        message.save(update_fields=["read"])
        BroadcastService.broadcast_message(message, event="message_read" if read else "new_message")
    return message


# =============================================================================
# Groups
# =============================================================================


def list_groups():
    """Groups newest first with their members prefetched."""
    return Group.objects.prefetch_related("members").order_by("-created_at")


@transaction.atomic
def create_group(name, member_ids) -> Group:
    """Create a recipient group.

    Raises:
        ValidationError: Missing name, no members, or unknown member ids
    """
    if not isinstance(name, str) or not name.strip() or not member_ids:
        raise ValidationError("Name and members are required")

    members = resolve_customers(member_ids)
    if not members:
        raise ValidationError("Name and members are required")

    group = Group.objects.create(name=name.strip())
    group.members.set(members)

    logger.info("Group created", extra={"group_id": str(group.pk), "members": len(members)})
    return group


def delete_group(group_id) -> None:
    """Delete a group. Its customers and their messages are untouched."""
    if not group_id:
        raise ValidationError("Group ID is required")
    try:
        group = Group.objects.get(pk=group_id)
    except (Group.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound(f"Group not found: {group_id}")
    group.delete()
    logger.info("Group deleted", extra={"group_id": str(group_id)})
