"""
Input validation utilities.

All checks run before any database call.
"""

import math
import re

from balcao.constants import SLUG_PATTERN


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


def require(value: str | None, message: str) -> str:
    """Return the stripped value or raise when it is blank."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(message)
    return cleaned


def optional_text(value: str | None) -> str | None:
    """Blank optional fields are stored as NULL."""
    cleaned = (value or "").strip()
    return cleaned or None


def validate_slug(slug: str | None) -> None:
    """Custom store URL: lowercase letters, digits and hyphens only."""
    if slug and not re.match(SLUG_PATTERN, slug):
        raise ValidationError("URL inválida: use apenas letras minúsculas, números e hífens")


def parse_amount(value, field: str = "valor") -> float:
    """Parse a non-negative monetary amount from form input."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"O {field} é obrigatório")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"O {field} deve ser numérico")
    if not math.isfinite(amount):
        raise ValidationError(f"O {field} deve ser numérico")
    if amount < 0:
        raise ValidationError(f"O {field} não pode ser negativo")
    return amount


def parse_optional_amount(value, field: str = "valor") -> float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_amount(value, field)
