from django import template

register = template.Library()


@register.filter(name="get_item")
def get_item(mapping, key):
    """
    Safe dict-like lookup usable in templates.

    Usage: {{ courses|get_item:acr }}
    - Returns None when the key is missing or the object isn't a mapping.
    """
    try:
        if hasattr(mapping, "get"):
            return mapping.get(key)
        return mapping[key]
    except (KeyError, IndexError, TypeError):
        return None


@register.filter
def chunk(seq, size: int):
    """Split search results into rows of 'size' for grid layouts."""
    try:
        size = int(size)
    except (TypeError, ValueError):
        size = 3
    seq = list(seq or [])
    return [seq[i : i + size] for i in range(0, len(seq), size)]


@register.filter
def units(value):
    """Render a unit count without a trailing '.0' (5.0 -> '5', 4.5 -> '4.5')."""
    if value is None or value == "":
        return ""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    return str(int(number)) if number.is_integer() else f"{number:g}"
