import hmac
import logging
from functools import wraps

from django.conf import settings

from .exceptions import AuthorizationError

logger = logging.getLogger(__name__)


def check_security_code(code):
    """
    Raise AuthorizationError unless ``code`` matches settings.SECURITY_CODE.
    Numbers are accepted too, since some clients post the code unquoted.
    """
    if code is None or isinstance(code, bool):
        raise AuthorizationError()
    if not hmac.compare_digest(str(code), str(settings.SECURITY_CODE)):
        raise AuthorizationError()


def security_code_required(view_func):
    """
    Allow only requests whose JSON body carries the shared ``securityCode``.
    Must sit under ``json_view`` so the body is already parsed.
    """
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        payload = getattr(request, "json_body", None) or {}
        try:
            check_security_code(payload.get("securityCode"))
        except AuthorizationError:
            logger.warning(f"[SECURITY] Rejected {request.method} {request.path}: bad security code")
            raise
        return view_func(request, *args, **kwargs)
    return _wrapped_view
