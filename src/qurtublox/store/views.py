"""Store API views.

GET/POST /api/products
GET/POST/PUT/DELETE /api/orders
POST /api/checkout
"""

import logging

from django.db import DatabaseError
from django.http import JsonResponse

from qurtublox.core.api import (
    JsonApiView,
    collection_version,
    list_response,
    parse_collection_version,
    parse_json_list,
    parse_json_object,
    versioned_list_response,
)
from qurtublox.core.conf import get_default_products

from . import services

logger = logging.getLogger(__name__)


class ProductsView(JsonApiView):
    """Product catalog.

    POST /api/products replaces the whole catalog:
    [
        {"sku": "QP-SHIRT-001", "name": "T-Shirt", "price": 25,
         "desc": "...", "status": "in_stock", "imageUrl": "...", "revision": 3}
    ]

    The save must carry the X-Collection-Version header from the GET it is
    based on whenever it removes products.
    """

    error_message = "Failed to save products"

    def get(self, request):
        version = collection_version()
        try:
            products = services.list_products()
        except DatabaseError as e:
            logger.exception(f"Error loading products: {e}")
            return versioned_list_response(get_default_products(), version)
        return versioned_list_response(products, version)

    def post(self, request):
        rows = parse_json_list(request)
        result = services.save_products(rows, version=parse_collection_version(request))
        return JsonResponse({"success": True, **result})


class OrdersView(JsonApiView):
    """Order records.

    POST /api/orders replaces the whole order list. Like the catalog save it
    needs the X-Collection-Version header from the GET to remove orders.

    PUT /api/orders
    {"id": "ORD-AB12CD", "status": "completed", "adminNote": "...", "revision": 2}

    DELETE /api/orders
    {"id": "ORD-AB12CD"}
    """

    error_message = "Failed to save orders"

    def get(self, request):
        version = collection_version()
        try:
            orders = [o.to_dict() for o in services.list_orders()]
        except DatabaseError as e:
            logger.exception(f"Error loading orders: {e}")
            return list_response([])
        return versioned_list_response(orders, version)

    def post(self, request):
        rows = parse_json_list(request)
        result = services.save_orders(rows, version=parse_collection_version(request))
        return JsonResponse({"success": True, **result})

    def put(self, request):
        data = parse_json_object(request)
        order = services.update_order(
            data.get("id"),
            status=data.get("status"),
            admin_note=data.get("adminNote"),
            revision=data.get("revision"),
        )
        return JsonResponse({"success": True, "order": order.to_dict()})

    def delete(self, request):
        data = parse_json_object(request)
        services.delete_order(data.get("id"))
        return JsonResponse({"success": True})


class CheckoutView(JsonApiView):
    """Place an order paid in points.

    POST /api/checkout
    {
        "customerId": "<uuid>",
        "items": [{"sku": "QP-SHIRT-001", "qty": 2}],
        "note": "Size M please"
    }

    Returns the new order and the customer's updated balance.
    """

    error_message = "Failed to place order"

    def post(self, request):
        data = parse_json_object(request)
        order, customer = services.checkout(
            data.get("customerId"),
            data.get("items"),
            note=data.get("note", ""),
        )
        return JsonResponse({"order": order.to_dict(), "customer": customer.to_dict()})
