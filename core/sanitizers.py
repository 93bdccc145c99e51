# core/sanitizers.py
"""
Input sanitization and validation for Science Hub.

All user-generated content should pass through these functions
before being stored or rendered.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

import bleach


# Allowed HTML tags for rich text (descriptions, cover letters, comments)
ALLOWED_TAGS = [
    'p', 'br', 'strong', 'em', 'u', 'a', 'ul', 'ol', 'li',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'blockquote', 'code', 'pre'
]

ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title'],
}

MAX_BUDGET = Decimal('9999999999.99')


class ValidationError(Exception):
    """Raised when validation fails."""
    pass


def sanitize_text(text: Optional[str], max_length: Optional[int] = None, strip: bool = True) -> str:
    """
    Sanitize plain text input.

    - Strips leading/trailing whitespace
    - Removes control characters
    - Enforces maximum length
    - Returns empty string for None input
    """
    if text is None:
        return ""

    if strip:
        text = text.strip()

    # Remove control characters except newlines and tabs
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_html(html: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Sanitize HTML content, removing dangerous elements.
    """
    if html is None:
        return ""

    clean = bleach.clean(
        html.strip(),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True
    )

    if max_length and len(clean) > max_length:
        clean = clean[:max_length]

    return clean


def sanitize_title(title: Optional[str]) -> str:
    """
    Sanitize project titles.

    - Max 255 characters
    - No HTML
    - Single line (no newlines)
    """
    text = sanitize_text(title, max_length=255)
    text = re.sub(r'[\r\n]+', ' ', text)
    text = re.sub(r'\s+', ' ', text)
    return text


def sanitize_description(description: Optional[str]) -> str:
    """
    Sanitize long-form text (project description, cover letter, review comment).

    - Max 10000 characters
    - HTML sanitized
    """
    return sanitize_html(description, max_length=10000)


def sanitize_string_list(values, max_items: int = 50, max_length: int = 100) -> list:
    """
    Normalize a list of short labels (skills, specializations).

    Trims each entry, drops blanks and case-insensitive duplicates,
    keeps the original order.
    """
    if values is None:
        return []

    if not isinstance(values, (list, tuple)):
        raise ValidationError("Expected a list of strings")

    cleaned = []
    seen = set()
    for value in values:
        if not isinstance(value, str):
            raise ValidationError("Expected a list of strings")
        item = sanitize_title(value)[:max_length]
        if item and item.lower() not in seen:
            seen.add(item.lower())
            cleaned.append(item)

    if len(cleaned) > max_items:
        raise ValidationError(f"At most {max_items} entries are allowed")

    return cleaned


# ─────────────────────────────────────────────────────────────
# Numeric Validators
# ─────────────────────────────────────────────────────────────

def validate_budget(value, max_value: Decimal = MAX_BUDGET) -> Optional[Decimal]:
    """
    Validate a money amount (project budgets, proposed budget).

    - None / empty string means "not specified"
    - Must be a valid, non-negative decimal
    - Rounded to 2 decimal places
    """
    if value is None:
        return None

    try:
        if isinstance(value, str):
            value = value.strip()
            if value == '':
                return None
        amount = Decimal(str(value))
    except (TypeError, ValueError, InvalidOperation):
        raise ValidationError("Budget must be a valid number")

    if not amount.is_finite():
        raise ValidationError("Budget must be a valid number")

    if amount < 0:
        raise ValidationError("Budget cannot be negative")

    if amount > max_value:
        raise ValidationError(f"Budget cannot exceed {max_value}")

    return amount.quantize(Decimal('0.01'))


def validate_budget_range(budget_min: Optional[Decimal], budget_max: Optional[Decimal]):
    """
    Both bounds present -> min must not exceed max.
    """
    if budget_min is not None and budget_max is not None and budget_min > budget_max:
        raise ValidationError("budget_min cannot be greater than budget_max")


def validate_rating(value, min_value: int = 1, max_value: int = 5) -> int:
    """
    Validate a review rating.

    - Must be an integer (bools and fractional values rejected)
    - Must be between min_value and max_value
    """
    if isinstance(value, bool):
        raise ValidationError("Rating must be an integer")

    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("Rating must be an integer")
        value = int(value)

    try:
        rating = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Rating must be an integer")

    if rating < min_value or rating > max_value:
        raise ValidationError(f"Rating must be between {min_value} and {max_value}")

    return rating


def validate_url(url: Optional[str], required: bool = False) -> Optional[str]:
    """
    Validate and sanitize URLs.
    """
    if not url:
        if required:
            raise ValidationError("URL is required")
        return None

    url = sanitize_text(url, max_length=2048)

    pattern = r'^https?://[^\s<>"{}|\\^`\[\]]+$'
    if not re.match(pattern, url):
        raise ValidationError("Invalid URL format")

    return url
