import logging
from functools import wraps

from utils.exceptions import EcoTrackError, StoreError
from utils.identifiers import RecordId

logger = logging.getLogger(__name__)


def valid_id_required(param='record_id', message="Invalid ID"):
    """Reject a request whose path identifier is not a store id, before the
    view touches the store."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            RecordId.parse(kwargs.get(param), message)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def store_errors(message):
    """Turn any unexpected failure inside a view into a StoreError carrying
    ``message``. Domain errors pass through untouched."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except EcoTrackError:
                raise
            except Exception as e:
                logger.exception("%s: %s", message, e)
                raise StoreError(message) from e
        return decorated_function
    return decorator
