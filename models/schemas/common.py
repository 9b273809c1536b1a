from datetime import date
from decimal import Decimal, InvalidOperation

from marshmallow import ValidationError

MIN_PASSWORD_LENGTH = 8


def validate_not_future(d: date) -> None:
    if d and d > date.today():
        raise ValidationError("Date cannot be in the future.")


def validate_password_strength(value: str) -> None:
    if value is None or len(value) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")


def validate_not_blank(value: str) -> None:
    if value is None or not value.strip():
        raise ValidationError("Must not be blank.")


def to_decimal_2(value) -> Decimal:
    if value is None:
        return None
    try:
        d = Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValidationError("Invalid decimal.")
    if d < 0:
        raise ValidationError("Must be greater than or equal to 0.")
    return d
