"""Messaging API views.

GET/POST/PUT /api/messages
GET/POST/DELETE /api/groups
"""

import logging

from django.db import DatabaseError
from django.http import JsonResponse

from qurtublox.core.api import JsonApiView, list_response, parse_json_object

from . import services

logger = logging.getLogger(__name__)


class MessagesView(JsonApiView):
    """Admin-to-customer messages.

    GET /api/messages?customerId=<uuid>

    POST /api/messages
    {
        "customerIds": ["<uuid>", "<uuid>"],
        "message": "Shop opens at noon tomorrow"
    }

    PUT /api/messages
    {"id": "<uuid>", "read": true}
    """

    error_message = "Failed to process message request"

    def get(self, request):
        customer_id = request.GET.get("customerId")
        try:
            messages = [m.to_dict() for m in services.list_messages(customer_id)]
        except DatabaseError as e:
            logger.exception(f"Error loading messages: {e}")
            return list_response([])
        return list_response(messages)

    def post(self, request):
        data = parse_json_object(request)
        messages = services.send_messages(data.get("customerIds"), data.get("message"))
        return list_response(m.to_dict() for m in messages)

    def put(self, request):
        data = parse_json_object(request)
        message = services.set_read(data.get("id"), data.get("read", True))
        return JsonResponse(message.to_dict())


class GroupsView(JsonApiView):
    """Recipient groups.

    POST /api/groups
    {"name": "VIP", "memberIds": ["<uuid>", "<uuid>"]}

    DELETE /api/groups
    {"id": "<uuid>"}
    """

    error_message = "Failed to process group request"

    def get(self, request):
        try:
            groups = [g.to_dict() for g in services.list_groups()]
        except DatabaseError as e:
            logger.exception(f"Error loading groups: {e}")
            return list_response([])
        return list_response(groups)

    def post(self, request):
        data = parse_json_object(request)
        group = services.create_group(data.get("name"), data.get("memberIds"))
        return JsonResponse({
            "id": str(group.pk),
            "name": group.name,
            "memberIds": group.member_ids(),
        })

    def delete(self, request):
        data = parse_json_object(request)
        services.delete_group(data.get("id"))
        return JsonResponse({"success": True})
