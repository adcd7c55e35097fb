import math


def paginate(query, page: int, limit: int):
    """Returns (rows, pagination dict) for a SQLAlchemy query."""
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    total_pages = math.ceil(total / limit) if limit else 0
    return rows, {
        "currentPage": page,
        "totalPages": total_pages,
        "totalItems": total,
        "itemsPerPage": limit,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def percent(part, whole) -> int:
    return round(part / whole * 100) if whole else 0
