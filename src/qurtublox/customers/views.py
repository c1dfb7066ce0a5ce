"""Customer API views.

GET/POST/PUT/DELETE /api/customers
POST /api/customers/verify
"""

import logging

from django.db import DatabaseError
from django.http import JsonResponse

from qurtublox.core.api import JsonApiView, list_response, parse_json_object

from . import services

logger = logging.getLogger(__name__)


class CustomersView(JsonApiView):
    """Customer accounts.

    POST /api/customers
    {
        "name": "Amina",
        "email": "amina@example.com",
        "password": "secret",
        "adminCreate": false
    }

    PUT /api/customers
    {
        "id": "<uuid>",
        "name": "Amina",
        "email": "amina@example.com",
        "points": 80,
        "unlimited": false,
        "password": "optional-new-password"
    }

    DELETE /api/customers
    {"id": "<uuid>"}
    """

    error_message = "Failed to process request"

    def get(self, request):
        try:
            customers = [c.to_dict() for c in services.list_customers()]
        except DatabaseError as e:
            logger.exception(f"Error loading customers: {e}")
            return list_response([])
        return list_response(customers)

    def post(self, request):
        data = parse_json_object(request)
        customer = services.create_customer(
            data.get("name"),
            data.get("email"),
            data.get("password"),
            admin_create=bool(data.get("adminCreate")),
            points=data.get("points"),
            unlimited=bool(data.get("unlimited", False)),
        )
        return JsonResponse(customer.to_dict())

    def put(self, request):
        data = parse_json_object(request)
        customer = services.update_customer(
            data.get("id"),
            data.get("name"),
            email=data.get("email"),
            points=data.get("points"),
            unlimited=bool(data.get("unlimited", False)),
            password=data.get("password"),
        )
        return JsonResponse({"success": True, "customer": customer.to_dict()})

    def delete(self, request):
        data = parse_json_object(request)
        services.delete_customer(data.get("id"))
        return JsonResponse({"success": True})


class CustomerVerifyView(JsonApiView):
    """Sign-in check.

    POST /api/customers/verify
    {"email": "amina@example.com", "password": "secret"}
    or
    {"id": "<uuid>", "password": "secret"}
    """

    error_message = "Failed to verify password"

    def post(self, request):
        data = parse_json_object(request)
        customer = services.verify_customer(
            data.get("password"),
            customer_id=data.get("id"),
            email=data.get("email"),
        )
        return JsonResponse(customer.to_dict())
