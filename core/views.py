import json
import logging
from functools import wraps

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from .exceptions import TrackerError, ValidationError

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def parse_json_body(request):
    """Decode the request body; an empty body is an empty object."""
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Corps de requête JSON invalide.")
    if not isinstance(payload, dict):
        raise ValidationError("Un objet JSON est attendu.")
    return payload


def json_view(view_func):
    """
    Turn a view returning plain data into a JSON endpoint.

    - decodes the JSON body of write requests into ``request.json_body``
    - TrackerError subclasses become ``{"error": ...}`` with their status
    - anything else is logged and reported as a generic 500
    """
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        try:
            request.json_body = parse_json_body(request) if request.method in BODY_METHODS else {}
            result = view_func(request, *args, **kwargs)
        except TrackerError as e:
            logger.info(f"[API] {request.method} {request.path} -> {e.status_code}: {e.message}")
            return JsonResponse(e.as_dict(), status=e.status_code)
        except Exception as e:
            logger.exception(f"[API] {request.method} {request.path} failed: {e}")
            return JsonResponse({"error": "Erreur interne du serveur."}, status=500)

        if isinstance(result, HttpResponse):
            return result
        return JsonResponse(result, safe=False)
    return csrf_exempt(_wrapped_view)


def method_not_allowed(request, allowed):
    response = JsonResponse({"error": f"Méthode {request.method} non autorisée."}, status=405)
    response["Allow"] = ", ".join(allowed)
    return response
