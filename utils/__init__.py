from .exceptions import handle_error, EcoTrackError, NotFoundError, ValidationError, ConflictError, StoreError

__all__ = [
    'handle_error',
    'EcoTrackError',
    'NotFoundError',
    'ValidationError',
    'ConflictError',
    'StoreError'
]
