import re
from datetime import datetime, timezone

from utils.exceptions import ValidationError

_LEADING_INT = re.compile(r'\s*([+-]?\d+)')


def require_fields(body, fields):
    """Raise for the first field that is missing, empty or zero"""
    for key in fields:
        value = body.get(key)
        if value is None or value == '' or value == 0:
            raise ValidationError(f"{key} is required")


def parse_int(value, field):
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")


def parse_float(value, field):
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")


def leading_int(value):
    """Integer prefix of a query-string value ("5abc" -> 5), or None"""
    if value is None or isinstance(value, bool):
        return None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def parse_int_or_default(value, default, minimum=1):
    """Lenient integer parsing for query-string paging parameters"""
    parsed = leading_int(value)
    if parsed is None or parsed < minimum:
        return default
    return parsed


def parse_datetime(value, field):
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC"""
    if isinstance(value, datetime):
        parsed = value
    else:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"Invalid {field}")
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid {field}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def try_parse_datetime(value):
    """Like parse_datetime but returns None instead of raising"""
    try:
        return parse_datetime(value, 'date')
    except ValidationError:
        return None


def utcnow():
    return datetime.now(timezone.utc)
