import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class EcoTrackError(Exception):
    """Base exception class for EcoTrack"""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['ok'] = False
        rv['message'] = self.message
        return rv

class ValidationError(EcoTrackError):
    """Raised when input validation fails"""
    def __init__(self, message="Validation error", payload=None):
        super().__init__(message, 400, payload)

class NotFoundError(EcoTrackError):
    """Raised when a resource is not found"""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class ConflictError(EcoTrackError):
    """Raised when a write would duplicate an existing record"""
    def __init__(self, message="Conflict", payload=None, status_code=400):
        super().__init__(message, status_code, payload)

class StoreError(EcoTrackError):
    """Raised when the record store fails; the message is safe to show"""
    def __init__(self, message="Server error", payload=None):
        super().__init__(message, 500, payload)

def handle_error(e, conflict_status=None):
    """Convert exceptions to JSON responses"""
    if isinstance(e, EcoTrackError):
        response = jsonify(e.to_dict())
        response.status_code = e.status_code
        if isinstance(e, ConflictError) and conflict_status:
            response.status_code = conflict_status
        return response
    logger.exception("Unhandled error: %s", e)
    response = jsonify({
        'ok': False,
        'message': 'An unexpected error occurred'
    })
    response.status_code = 500
    return response
