"""
Errors raised by the product and inventory services.

Each error knows the HTTP status it maps to, so views only have to catch
``TrackerError`` and let ``core.views.json_view`` render it.
"""


class TrackerError(Exception):
    status_code = 500
    default_message = "Erreur interne."

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def as_dict(self):
        payload = {"error": self.message}
        payload.update(self.extra)
        return payload


class ValidationError(TrackerError):
    """Malformed payload or invalid field value."""
    status_code = 400
    default_message = "Données invalides."


class AuthorizationError(TrackerError):
    """Wrong or missing security code."""
    status_code = 403
    default_message = "Code de sécurité incorrect."


class NotFoundError(TrackerError):
    status_code = 404
    default_message = "Ressource introuvable."


class ConflictError(TrackerError):
    """Duplicate name, or a delete blocked by dependent inventory records."""
    status_code = 409
    default_message = "Conflit avec les données existantes."
