"""Helpers shared by the JSON API views.

Every API view subclasses JsonApiView, which:
- exempts the endpoint from CSRF (JSON API for the storefront SPA)
- converts StoreError subclasses into ``{"error": ...}`` responses, with
  the error's ``details`` when it carries any
- logs anything unexpected and answers 500 with the view's error_message

Collection endpoints that accept a whole-list save hand out a version in
the ``X-Collection-Version`` header on GET. The client sends it back with
the save so rows created after its read are never deleted.
"""

import json
import logging

from django.db import DatabaseError
from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .exceptions import StoreError, ValidationError

logger = logging.getLogger(__name__)

MISSING_TABLE_MARKERS = ("does not exist", "no such table", "relation")

COLLECTION_VERSION_HEADER = "X-Collection-Version"

# Largest value a PostgreSQL integer column holds
MAX_INTEGER = 2147483647


def error_response(message, status, details=None):
    payload = {"error": message}
    if details:
        payload["details"] = details
    return JsonResponse(payload, status=status)


def list_response(items):
    return JsonResponse(list(items), safe=False)


def versioned_list_response(items, version):
    response = list_response(items)
    response[COLLECTION_VERSION_HEADER] = version.isoformat()
    return response


def collection_version():
    """Version stamp for a collection read that starts now."""
    return timezone.now()


def parse_collection_version(request):
    """The collection version a bulk save was based on, or None."""
    value = request.headers.get(COLLECTION_VERSION_HEADER)
    if not value:
        return None
    try:
        version = parse_datetime(value.strip())
    except ValueError:
        version = None
    if version is None:
        raise ValidationError(f"Invalid {COLLECTION_VERSION_HEADER}: {value}")
    if timezone.is_naive(version):
        version = timezone.make_aware(version)
    return version


def parse_json(request):
    """Decode the request body, raising ValidationError on bad JSON."""
    if not request.body:
        return {}
    try:
        return json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON")


def parse_json_object(request):
    data = parse_json(request)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data


def parse_json_list(request):
    data = parse_json(request)
    if not isinstance(data, list):
        raise ValidationError("Expected a JSON array")
    return data


def is_missing_table(exc: Exception) -> bool:
    """True when a database error means the backing table is not there."""
    if not isinstance(exc, DatabaseError):
        return False
    cause = exc.__cause__
    if getattr(cause, "sqlstate", None) == "42P01" or getattr(cause, "pgcode", None) == "42P01":
        return True
    text = str(exc).lower()
    return any(marker in text for marker in MISSING_TABLE_MARKERS)


@method_decorator(csrf_exempt, name="dispatch")
class JsonApiView(View):
    """Base class for the store's JSON endpoints."""

    error_message = "Failed to process request"

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except StoreError as e:
            if e.status_code >= 500:
                logger.error(
                    f"{self.__class__.__name__}: {e.message}",
                    extra={"path": request.path, "method": request.method},
                )
            return error_response(e.message, e.status_code, e.details)
        except Exception as e:
            logger.exception(f"{self.__class__.__name__} failed: {e}")
            return error_response(self.error_message, 500)

    def http_method_not_allowed(self, request, *args, **kwargs):
        return JsonResponse(
            {"error": f"Method {request.method} not allowed"},
            status=405,
            headers={"Allow": ", ".join(self._allowed_methods())},
        )
