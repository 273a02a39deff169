"""
The fixed set of event categories.

Server-side validation and the client's category selectors both read this
list (the latter through GET /api/events/categories).
"""

from typing import Union

from eventy.core.exceptions import ValidationError

EVENT_CATEGORIES: tuple[str, ...] = (
    "Arts & Entertainment",
    "Sports & Outdoors",
    "Learning & Career",
    "Community & Causes",
)


def normalize_categories(value: Union[str, list[str], None]) -> list[str]:
    """
    Coerce a scalar category into a one-element list and check every member
    against EVENT_CATEGORIES. Duplicates are dropped, order is kept.
    """
    if value is None:
        categories: list[str] = []
    elif isinstance(value, str):
        categories = [value]
    else:
        categories = list(value)

    categories = list(dict.fromkeys(c.strip() for c in categories if c and c.strip()))
    if not categories:
        raise ValidationError(
            "Category is required",
            errors=[{"field": "category", "message": "Category is required"}],
        )

    invalid = [c for c in categories if c not in EVENT_CATEGORIES]
    if invalid:
        message = (
            f"{', '.join(invalid)} contains invalid categories. "
            f"Valid categories are: {', '.join(EVENT_CATEGORIES)}"
        )
        raise ValidationError(message, errors=[{"field": "category", "message": message}])

    return categories
