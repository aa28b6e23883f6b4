import math
from datetime import date

from services.errors import ValidationError


def require_text(value, label):
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required")
    return text


def optional_text(value):
    text = str(value or "").strip()
    return text or None


def parse_int(value, label, default=None):
    if value is None or value == "":
        if default is None:
            raise ValidationError(f"{label} is required")
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a whole number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a whole number") from None
    if not number.is_integer():
        raise ValidationError(f"{label} must be a whole number")
    return int(number)


def parse_float(value, label, default=None, minimum=None):
    if value is None or value == "":
        if default is None:
            raise ValidationError(f"{label} is required")
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number") from None
    if not math.isfinite(number):
        raise ValidationError(f"{label} must be a number")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{label} must be at least {minimum:g}")
    return number


def parse_date(value, label="Date"):
    """Normalise to an ISO ``YYYY-MM-DD`` string; None stays None."""
    if value is None or value == "":
        return None
    try:
        return date.fromisoformat(str(value)[:10]).isoformat()
    except ValueError:
        raise ValidationError(f"{label} must be YYYY-MM-DD") from None
