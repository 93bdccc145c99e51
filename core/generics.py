from rest_framework.exceptions import NotFound


def get_or_404(queryset, pk, label: str):
    """
    Fetch one row by primary key or raise NotFound("<label> not found").

    Non-numeric ids are treated as missing rows, not as server errors.
    """
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{label} not found")


def strip_fields(data, fields) -> dict:
    """
    Copy request data without the given keys (immutable columns).
    """
    cleaned = dict(data.items()) if hasattr(data, "items") else {}
    for field in fields:
        cleaned.pop(field, None)
    return cleaned
