import math


def paginate(items, page=1, per_page=20):
    """Slice a list for one page of a table view."""
    per_page = max(1, int(per_page))
    total = len(items)
    pages = max(1, math.ceil(total / per_page))
    page = min(max(1, int(page)), pages)
    start = (page - 1) * per_page
    return {
        'items': items[start:start + per_page],
        'page': page,
        'per_page': per_page,
        'total': total,
        'pages': pages,
    }


def int_arg(value, default):
    """Parse a positive int query argument, falling back on junk."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default
