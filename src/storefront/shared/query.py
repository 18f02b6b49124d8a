"""Helpers over Protean query sets."""

PAGE_SIZE = 100


def fetch_all(query, page_size: int = PAGE_SIZE) -> list:
    """Every record matched by `query`, read page by page.

    Protean caps an unbounded `all()` at its default limit, so scans that must
    see the whole table go through here.
    """
    records = []
    offset = 0
    while True:
        page = query.offset(offset).limit(page_size).all().items
        records.extend(page)
        if len(page) < page_size:
            return records
        offset += page_size
